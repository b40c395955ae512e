import requests
from fastapi import APIRouter, Depends

from subfeed.config import Settings, get_settings
from subfeed.http_client import get_session
from subfeed.models.videos import SubscriptionFeed
from subfeed.services import youtube as youtube_service

router = APIRouter(prefix="/api", tags=["videos"])


@router.get("/videos")
def subscribed_videos(
    access_token: str | None = None,
    settings: Settings = Depends(get_settings),
    session: requests.Session = Depends(get_session),
) -> SubscriptionFeed:
    return youtube_service.get_subscription_feed(
        access_token,
        settings.youtube_api_key,
        session,
        max_subscriptions=settings.max_subscriptions,
        videos_per_channel=settings.videos_per_channel,
        limit=settings.feed_limit,
    )
