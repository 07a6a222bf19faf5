"""Project Innertube (and ``ytInitialData``) documents into raw items.

The documents are externally defined and change without notice, so every
renderer is decoded into an all-optional model and items lacking a usable
video id are dropped instead of failing the batch.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..core.models import PlaylistSummary, RawItem

logger = logging.getLogger(__name__)

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
VIDEO_KINDS = ("videoRenderer", "gridVideoRenderer", "playlistVideoRenderer")


class _Node(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class BrowseEndpoint(_Node):
    browse_id: Optional[str] = None
    canonical_base_url: Optional[str] = None


class NavigationEndpoint(_Node):
    browse_endpoint: Optional[BrowseEndpoint] = None


class Run(_Node):
    text: str = ""
    navigation_endpoint: Optional[NavigationEndpoint] = None

    @field_validator("text", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v


class Text(_Node):
    simple_text: Optional[str] = None
    runs: list[Run] = Field(default_factory=list)

    @property
    def text(self) -> str:
        if self.simple_text is not None:
            return self.simple_text.strip()
        return "".join(run.text for run in self.runs).strip()

    @property
    def browse_id(self) -> str:
        for run in self.runs:
            endpoint = run.navigation_endpoint.browse_endpoint if run.navigation_endpoint else None
            if endpoint and endpoint.browse_id:
                return endpoint.browse_id
        return ""


class ThumbnailRef(_Node):
    url: str = ""
    width: Optional[int] = None


class Thumbnails(_Node):
    thumbnails: list[ThumbnailRef] = Field(default_factory=list)

    @property
    def best_url(self) -> str:
        # Innertube lists thumbnails smallest first.
        for ref in reversed(self.thumbnails):
            if ref.url:
                return "https:" + ref.url if ref.url.startswith("//") else ref.url
        return ""


class TimeStatus(_Node):
    text: Optional[Text] = None


class ThumbnailOverlay(_Node):
    thumbnail_overlay_time_status_renderer: Optional[TimeStatus] = None


class MetadataSnippet(_Node):
    snippet_text: Optional[Text] = None


class VideoRenderer(_Node):
    """Shared shape of ``videoRenderer`` and ``gridVideoRenderer`` items."""

    video_id: Optional[str] = None
    title: Optional[Text] = None
    description_snippet: Optional[Text] = None
    detailed_metadata_snippets: list[MetadataSnippet] = Field(default_factory=list)
    owner_text: Optional[Text] = None
    long_byline_text: Optional[Text] = None
    short_byline_text: Optional[Text] = None
    view_count_text: Optional[Text] = None
    short_view_count_text: Optional[Text] = None
    length_text: Optional[Text] = None
    published_time_text: Optional[Text] = None
    thumbnail: Optional[Thumbnails] = None
    thumbnail_overlays: list[ThumbnailOverlay] = Field(default_factory=list)

    def to_raw(self) -> RawItem:
        byline = self.owner_text or self.long_byline_text or self.short_byline_text
        description = _text(self.description_snippet)
        if not description and self.detailed_metadata_snippets:
            description = _text(self.detailed_metadata_snippets[0].snippet_text)
        length = _text(self.length_text)
        if not length:
            for overlay in self.thumbnail_overlays:
                status = overlay.thumbnail_overlay_time_status_renderer
                if status and status.text:
                    length = status.text.text
                    break
        return RawItem(
            video_id=self.video_id or "",
            title=_text(self.title),
            description=description,
            channel_name=byline.runs[0].text.strip() if byline and byline.runs else _text(byline),
            channel_id=_channel_id(byline),
            view_text=_text(self.view_count_text) or _text(self.short_view_count_text),
            length_text=length,
            published_text=_text(self.published_time_text),
            thumbnail=self.thumbnail.best_url if self.thumbnail else "",
        )


class PlaylistVideoRenderer(_Node):
    video_id: Optional[str] = None
    title: Optional[Text] = None
    short_byline_text: Optional[Text] = None
    length_seconds: Optional[str] = None
    length_text: Optional[Text] = None
    video_info: Optional[Text] = None
    thumbnail: Optional[Thumbnails] = None
    is_playable: Optional[bool] = None

    def to_raw(self) -> RawItem:
        view_text = published_text = ""
        # videoInfo runs look like ["1.2M views", " • ", "3 years ago"].
        for run in self.video_info.runs if self.video_info else []:
            lowered = run.text.lower()
            if "view" in lowered and not view_text:
                view_text = run.text.strip()
            elif "ago" in lowered and not published_text:
                published_text = run.text.strip()
        byline = self.short_byline_text
        return RawItem(
            video_id=self.video_id or "",
            title=_text(self.title),
            channel_name=byline.runs[0].text.strip() if byline and byline.runs else _text(byline),
            channel_id=_channel_id(byline),
            view_text=view_text,
            length_text=self.length_seconds or _text(self.length_text),
            published_text=published_text,
            thumbnail=self.thumbnail.best_url if self.thumbnail else "",
        )


class PlaylistRenderer(_Node):
    playlist_id: Optional[str] = None
    title: Optional[Text] = None
    short_byline_text: Optional[Text] = None
    long_byline_text: Optional[Text] = None
    video_count: Optional[str] = None
    video_count_text: Optional[Text] = None
    thumbnails: list[Thumbnails] = Field(default_factory=list)


def _text(node: Optional[Text]) -> str:
    return node.text if node else ""


def _channel_id(node: Optional[Text]) -> str:
    browse_id = node.browse_id if node else ""
    return browse_id if browse_id.startswith("UC") else ""


def dig(node: Any, *path: Any) -> Any:
    """Follow ``path`` through dicts and lists, returning None on any gap."""
    current = node
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _item_lists(data: Any) -> Iterator[list]:
    """Yield the top-level item arrays of every known response shape."""
    yield _as_list(
        dig(data, "contents", "twoColumnSearchResultsRenderer", "primaryContents", "sectionListRenderer", "contents")
    )
    for tab in _as_list(dig(data, "contents", "twoColumnBrowseResultsRenderer", "tabs")):
        content = dig(tab, "tabRenderer", "content")
        yield _as_list(dig(content, "sectionListRenderer", "contents"))
        yield _as_list(dig(content, "richGridRenderer", "contents"))
    yield _as_list(dig(data, "contents", "sectionListRenderer", "contents"))
    for key in ("onResponseReceivedCommands", "onResponseReceivedActions"):
        for command in _as_list(data.get(key) if isinstance(data, dict) else None):
            yield _as_list(dig(command, "appendContinuationItemsAction", "continuationItems"))


def _flatten(entries: Iterable[Any]) -> Iterator[dict]:
    """Unwrap section, grid and list containers down to individual items."""
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if "itemSectionRenderer" in entry:
            yield from _flatten(_as_list(dig(entry, "itemSectionRenderer", "contents")))
        elif "richItemRenderer" in entry:
            content = dig(entry, "richItemRenderer", "content")
            if isinstance(content, dict):
                yield content
        elif "playlistVideoListRenderer" in entry:
            yield from _flatten(_as_list(dig(entry, "playlistVideoListRenderer", "contents")))
        elif "gridRenderer" in entry:
            yield from _flatten(_as_list(dig(entry, "gridRenderer", "items")))
        elif "shelfRenderer" in entry:
            content = dig(entry, "shelfRenderer", "content") or {}
            for container in ("verticalListRenderer", "horizontalListRenderer", "expandedShelfContentsRenderer"):
                yield from _flatten(_as_list(dig(content, container, "items")))
        else:
            yield entry


def _iter_items(data: Any) -> Iterator[dict]:
    for entries in _item_lists(data):
        yield from _flatten(entries)


def _decode_video(item: dict) -> Optional[RawItem]:
    for kind in VIDEO_KINDS:
        node = item.get(kind)
        if not isinstance(node, dict):
            continue
        model = PlaylistVideoRenderer if kind == "playlistVideoRenderer" else VideoRenderer
        try:
            raw = model.model_validate(node).to_raw()
        except ValidationError as exc:
            logger.debug("Skipping malformed %s: %s", kind, exc.error_count())
            return None
        return raw if VIDEO_ID_RE.match(raw.video_id) else None
    return None


def parse_video_items(data: Any) -> list[RawItem]:
    """Collect video items from a search, browse or ``ytInitialData`` document."""
    if not isinstance(data, dict):
        return []
    items: list[RawItem] = []
    for item in _iter_items(data):
        raw = _decode_video(item)
        if raw is not None:
            items.append(raw)
    return items


def parse_search_playlists(data: Any) -> list[PlaylistSummary]:
    """Collect ``playlistRenderer`` results from a playlist-filtered search."""
    if not isinstance(data, dict):
        return []
    playlists: list[PlaylistSummary] = []
    for item in _iter_items(data):
        node = item.get("playlistRenderer")
        if not isinstance(node, dict):
            continue
        try:
            renderer = PlaylistRenderer.model_validate(node)
        except ValidationError:
            continue
        if not renderer.playlist_id:
            continue
        byline = renderer.short_byline_text or renderer.long_byline_text
        playlists.append(
            PlaylistSummary(
                id=renderer.playlist_id,
                title=_text(renderer.title),
                channel_name=_text(byline),
                video_count=renderer.video_count or _text(renderer.video_count_text),
                thumbnail=renderer.thumbnails[0].best_url if renderer.thumbnails else "",
            )
        )
    return playlists


class VideoDetails(_Node):
    """``videoDetails`` block of a player response."""

    video_id: Optional[str] = None
    title: Optional[str] = None
    short_description: Optional[str] = None
    author: Optional[str] = None
    channel_id: Optional[str] = None
    length_seconds: Optional[str] = None
    view_count: Optional[str] = None
    thumbnail: Optional[Thumbnails] = None


class PlayerMicroformat(_Node):
    publish_date: Optional[str] = None
    upload_date: Optional[str] = None


def parse_video_details(data: Any) -> Optional[RawItem]:
    """Project a player response (``player`` endpoint or ``ytInitialPlayerResponse``)."""
    node = dig(data, "videoDetails")
    if not isinstance(node, dict):
        return None
    try:
        details = VideoDetails.model_validate(node)
        microformat = PlayerMicroformat.model_validate(
            dig(data, "microformat", "playerMicroformatRenderer") or {}
        )
    except ValidationError as exc:
        logger.debug("Skipping malformed videoDetails: %s", exc.error_count())
        return None
    if not details.video_id or not VIDEO_ID_RE.match(details.video_id):
        return None
    return RawItem(
        video_id=details.video_id,
        title=(details.title or "").strip(),
        description=(details.short_description or "").strip(),
        channel_name=(details.author or "").strip(),
        channel_id=details.channel_id or "",
        view_text=details.view_count or "",
        length_text=details.length_seconds or "",
        published_at=microformat.publish_date or microformat.upload_date or "",
        thumbnail=details.thumbnail.best_url if details.thumbnail else "",
    )
