"""Builds a user's subscription feed from the YouTube Data API.

The flow is strictly sequential: validate the token, list subscriptions,
search each subscribed channel for its latest uploads, sanitize, then sort
and truncate. A failing channel contributes no videos; every other failure
ends the request.
"""

import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from functools import partial

import requests

from subfeed.exceptions import (
    ChannelFetchError,
    FeedError,
    InternalError,
    InvalidTokenError,
    MissingTokenError,
    SubscriptionsNotFoundError,
    UpstreamError,
)
from subfeed.models.videos import (
    SanitizedVideo,
    SubscriptionFeed,
    Thumbnail,
    Thumbnails,
    VideoId,
    VideoSnippet,
)

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


def _bearer_headers(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


def _dig(data, *keys):
    """Walk nested dicts, returning None as soon as a level is missing or not a dict."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _text(value) -> str:
    """Return value when it is a string, otherwise an empty string."""
    return value if isinstance(value, str) else ""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _upstream_error(error) -> UpstreamError:
    if not isinstance(error, dict):
        return UpstreamError("YouTube API Error", details=error)
    code = error.get("code")
    status = code if isinstance(code, int) and 400 <= code < 600 else 400
    return UpstreamError(error.get("message") or "YouTube API Error", status_code=status, details=error)


def validate_token(access_token: str, session: requests.Session) -> None:
    """Check the token against Google's userinfo endpoint."""
    resp = session.get(USERINFO_URL, headers=_bearer_headers(access_token))
    if not resp.ok:
        raise InvalidTokenError()


def list_subscribed_channel_ids(
    access_token: str,
    session: requests.Session,
    max_results: int = 50,
) -> list[str]:
    """Return the channel ids the token's owner is subscribed to, in upstream order."""
    logger.info("Fetching subscriptions with access token: %s...", access_token[:10])
    resp = session.get(
        f"{YOUTUBE_API_BASE}/subscriptions",
        params={"part": "snippet", "mine": "true", "maxResults": max_results},
        headers={**_bearer_headers(access_token), "Accept": "application/json"},
    )
    data = resp.json()
    error = data.get("error")
    if error:
        logger.error("YouTube API error while listing subscriptions: %s", error)
        raise _upstream_error(error)

    items = data.get("items") or []
    if not items:
        raise SubscriptionsNotFoundError()

    channel_ids = [cid for cid in (_text(_dig(sub, "snippet", "resourceId", "channelId")) for sub in items) if cid]
    logger.info("Found subscribed channels: %s", channel_ids)
    return channel_ids


def sanitize_video(raw) -> SanitizedVideo:
    """Map a raw search result onto the fixed video shape, filling in defaults."""
    return SanitizedVideo(
        id=VideoId(video_id=_text(_dig(raw, "id", "videoId"))),
        snippet=VideoSnippet(
            title=_text(_dig(raw, "snippet", "title")),
            thumbnails=Thumbnails(
                medium=Thumbnail(url=_text(_dig(raw, "snippet", "thumbnails", "medium", "url"))),
            ),
            published_at=_text(_dig(raw, "snippet", "publishedAt")) or _now_iso(),
        ),
    )


def sanitize_videos(items: Iterable | None) -> list[SanitizedVideo]:
    """Sanitize a channel's search results, dropping videos without an id or thumbnail."""
    videos = [sanitize_video(item) for item in items or []]
    return [v for v in videos if v.id.video_id and v.snippet.thumbnails.medium.url]


def fetch_channel_videos(
    channel_id: str,
    api_key: str,
    session: requests.Session,
    max_results: int = 5,
) -> list[SanitizedVideo]:
    """Search one channel for its most recent videos using the server API key.

    Raises ChannelFetchError when the request fails, the status is not 2xx,
    the body is not JSON, or the payload carries an error.
    """
    params = {
        "key": api_key,
        "channelId": channel_id,
        "part": "snippet,id",
        "order": "date",
        "maxResults": max_results,
        "type": "video",
    }
    try:
        resp = session.get(f"{YOUTUBE_API_BASE}/search", params=params, headers={"Accept": "application/json"})
    except requests.RequestException as e:
        raise ChannelFetchError(channel_id, f"Request failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise ChannelFetchError(channel_id, f"Undecodable response (HTTP {resp.status_code})") from e

    if not isinstance(data, dict):
        raise ChannelFetchError(channel_id, f"Unexpected payload (HTTP {resp.status_code})", details=data)
    error = data.get("error")
    if not resp.ok or error:
        raise ChannelFetchError(channel_id, f"YouTube search failed (HTTP {resp.status_code})", details=error or data)
    return sanitize_videos(data.get("items"))


def collect_channel_videos(
    channel_ids: Iterable[str],
    fetch: Callable[[str], list[SanitizedVideo]],
) -> list[list[SanitizedVideo]]:
    """Fetch one batch per channel, in order. A failing channel yields an empty batch."""
    batches = []
    for channel_id in channel_ids:
        try:
            batches.append(fetch(channel_id))
        except ChannelFetchError as e:
            logger.warning("Error fetching videos for channel %s: %s", channel_id, e.details or e.message)
            batches.append([])
    return batches


def _published_timestamp(video: SanitizedVideo) -> datetime:
    value = video.snippet.published_at
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # fromisoformat on 3.10 only accepts 3 or 6 fractional digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def aggregate_videos(
    batches: Iterable[list[SanitizedVideo]],
    subscription_count: int,
    limit: int = 10,
) -> SubscriptionFeed:
    """Merge channel batches, newest first, keeping at most `limit` videos."""
    videos = [video for batch in batches for video in batch]
    videos.sort(key=_published_timestamp, reverse=True)
    return SubscriptionFeed(items=videos[:limit], subscription_count=subscription_count)


def get_subscription_feed(
    access_token: str | None,
    api_key: str,
    session: requests.Session,
    max_subscriptions: int = 50,
    videos_per_channel: int = 5,
    limit: int = 10,
) -> SubscriptionFeed:
    """Build the most recent videos across the user's subscribed channels."""
    if not access_token:
        raise MissingTokenError()

    try:
        validate_token(access_token, session)
        channel_ids = list_subscribed_channel_ids(access_token, session, max_subscriptions)
        if not api_key:
            logger.warning("YOUTUBE_API_KEY is not set; channel searches will be rejected upstream.")
        fetch = partial(fetch_channel_videos, api_key=api_key, session=session, max_results=videos_per_channel)
        batches = collect_channel_videos(channel_ids, fetch)
        return aggregate_videos(batches, len(channel_ids), limit)
    except FeedError:
        raise
    except Exception as e:
        logger.exception("Error fetching subscribed videos")
        raise InternalError(str(e)) from e
