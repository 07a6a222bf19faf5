from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .utils import estimate_publish_date, parse_duration, parse_view_count

THUMBNAIL_TEMPLATE = "https://i.ytimg.com/vi/{id}/hqdefault.jpg"
EMBED_TEMPLATE = "https://www.youtube.com/embed/{id}"

SourceType = Literal["embedded"]


class Video(BaseModel):
    """Canonical video record handed to the UI layer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = ""
    description: str = ""
    thumbnail: str = ""
    source: SourceType = "embedded"
    video_url: str = ""
    duration: str = Field(default="", description="H:MM:SS or M:SS, empty when unknown")
    views: str = Field(default="", description="Abbreviated view count, empty when unknown")
    published_at: str = Field(default="", description="ISO-8601, possibly estimated")
    channel_name: str = ""
    channel_id: str = ""
    is_free: bool = True

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("id must not be blank")
        return v

    @field_validator(
        "title", "description", "thumbnail", "duration", "views", "published_at", "channel_name", "channel_id",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, v: str | None) -> str:
        return "" if v is None else str(v).strip()

    @model_validator(mode="after")
    def _derive_urls(self) -> "Video":
        if not self.thumbnail:
            self.thumbnail = THUMBNAIL_TEMPLATE.format(id=self.id)
        if not self.video_url:
            self.video_url = EMBED_TEMPLATE.format(id=self.id)
        return self

    def to_payload(self) -> dict:
        """Serialize with the camelCase field names the UI renders."""
        return self.model_dump(by_alias=True)


@dataclass(slots=True)
class RawItem:
    """Partially populated item as projected by a response parser."""

    video_id: str
    title: str = ""
    description: str = ""
    channel_name: str = ""
    channel_id: str = ""
    view_text: str = ""
    length_text: str = ""
    published_text: str = ""
    published_at: str = ""
    thumbnail: str = ""

    def to_video(self) -> Video:
        published = self.published_at or estimate_publish_date(self.published_text)
        return Video(
            id=self.video_id,
            title=self.title,
            description=self.description,
            thumbnail=self.thumbnail,
            duration=parse_duration(self.length_text),
            views=parse_view_count(self.view_text),
            published_at=published,
            channel_name=self.channel_name,
            channel_id=self.channel_id,
        )


class ChannelSummary(BaseModel):
    """Channel observed in search results during discovery."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str = ""
    thumbnail: str = ""
    video_count: int = Field(default=0, ge=0)


class ChannelInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = ""
    description: str = ""
    thumbnail: str = ""
    subscriber_count: str = ""
    video_count: str = ""


class PlaylistSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = ""
    channel_name: str = ""
    video_count: str = ""
    thumbnail: str = ""


class Category(BaseModel):
    """Heuristic category seed derived from discovery results."""

    name: str
    query: str
    video_count: int = 0
