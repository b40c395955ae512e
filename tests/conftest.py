import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from subfeed.services.youtube import USERINFO_URL


# --- Canned API responses ---

def make_subscription(channel_id):
    return {
        "kind": "youtube#subscription",
        "snippet": {
            "title": f"Channel {channel_id}",
            "resourceId": {"kind": "youtube#channel", "channelId": channel_id},
        },
    }


def make_search_item(video_id, published_at, title=None):
    return {
        "kind": "youtube#searchResult",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "title": title if title is not None else f"Video {video_id}",
            "publishedAt": published_at,
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
        },
    }


USERINFO = {"sub": "1098765", "email": "viewer@example.com"}

SUBSCRIPTIONS_API_LIST = {
    "items": [make_subscription("chanA"), make_subscription("chanB")],
}

# chanA uploads T-1, T-2, T-3; chanB uploads T-0, T-4
CHANNEL_A_SEARCH = {
    "items": [
        make_search_item("a1", "2025-01-09T12:00:00Z"),
        make_search_item("a2", "2025-01-08T12:00:00Z"),
        make_search_item("a3", "2025-01-07T12:00:00Z"),
    ],
}

CHANNEL_B_SEARCH = {
    "items": [
        make_search_item("b0", "2025-01-10T12:00:00Z"),
        make_search_item("b4", "2025-01-06T12:00:00Z"),
    ],
}

SEARCH_API_ERROR = {
    "error": {"code": 500, "message": "Backend Error", "errors": [{"reason": "backendError"}]},
}


def make_response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = payload if payload is not None else {}
    return resp


class FakeGoogleApi:
    """Routes session.get calls to canned userinfo, subscriptions and search responses.

    A search entry may be an exception instance, which is raised instead of returned.
    """

    def __init__(self):
        self.userinfo = make_response(200, USERINFO)
        self.subscriptions = make_response(200, SUBSCRIPTIONS_API_LIST)
        self.searches = {
            "chanA": make_response(200, CHANNEL_A_SEARCH),
            "chanB": make_response(200, CHANNEL_B_SEARCH),
        }
        self.session = MagicMock()
        self.session.get.side_effect = self._get

    def _get(self, url, params=None, headers=None):
        if url == USERINFO_URL:
            return self.userinfo
        if url.endswith("/subscriptions"):
            return self.subscriptions
        if url.endswith("/search"):
            result = self.searches[params["channelId"]]
            if isinstance(result, Exception):
                raise result
            return result
        raise AssertionError(f"Unexpected URL: {url}")

    @property
    def urls(self) -> list[str]:
        return [c.args[0] for c in self.session.get.call_args_list]

    @property
    def search_calls(self) -> list:
        return [c for c in self.session.get.call_args_list if c.args[0].endswith("/search")]


@pytest.fixture
def google_api():
    """Fake Google API backing a mocked requests.Session."""
    return FakeGoogleApi()


@pytest.fixture
def api_client(google_api):
    """FastAPI TestClient with the HTTP session and settings substituted."""
    from subfeed.config import Settings, get_settings
    from subfeed.http_client import get_session
    from subfeed.main import api

    api.dependency_overrides[get_session] = lambda: google_api.session
    api.dependency_overrides[get_settings] = lambda: Settings(youtube_api_key="server-key")
    yield TestClient(api)
    api.dependency_overrides.clear()
