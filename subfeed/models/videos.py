from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Field names are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)


class VideoId(_WireModel):
    video_id: str = Field(alias="videoId")


class Thumbnail(_WireModel):
    url: str


class Thumbnails(_WireModel):
    medium: Thumbnail


class VideoSnippet(_WireModel):
    title: str
    thumbnails: Thumbnails
    published_at: str = Field(alias="publishedAt")


class SanitizedVideo(_WireModel):
    id: VideoId
    snippet: VideoSnippet


class SubscriptionFeed(_WireModel):
    items: list[SanitizedVideo]
    subscription_count: int = Field(alias="subscriptionCount")
