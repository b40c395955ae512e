from fastmcp import FastMCP

from subfeed.config import get_settings
from subfeed.exceptions import FeedError, InvalidTokenError, MissingTokenError
from subfeed.http_client import get_session
from subfeed.services import youtube as youtube_service

mcp = FastMCP("Subfeed")


def _handle_mcp_error(e: FeedError) -> dict:
    """Convert feed errors to agent-friendly error dicts."""
    result = {"error": e.error_code, "message": e.message, "status": e.status_code}
    if e.details is not None:
        result["details"] = e.details
    if isinstance(e, (MissingTokenError, InvalidTokenError)):
        result["action"] = "Ask user to sign in with Google again and pass a fresh access token"
    return result


@mcp.tool
def subscription_feed(access_token: str) -> dict:
    """Get the 10 most recent videos across the user's YouTube subscriptions.
    Requires a Google OAuth access token with the youtube.readonly scope.
    Returns videos (newest first) and the number of subscribed channels considered."""
    settings = get_settings()
    try:
        feed = youtube_service.get_subscription_feed(
            access_token,
            settings.youtube_api_key,
            get_session(),
            max_subscriptions=settings.max_subscriptions,
            videos_per_channel=settings.videos_per_channel,
            limit=settings.feed_limit,
        )
        return feed.model_dump(by_alias=True)
    except FeedError as e:
        return _handle_mcp_error(e)


@mcp.tool
def feed_status() -> dict:
    """Check whether the server is configured to search channels for videos."""
    configured = bool(get_settings().youtube_api_key)
    return {
        "api_key_configured": configured,
        "message": "Ready" if configured else "YOUTUBE_API_KEY is not set; channel searches will fail",
    }
