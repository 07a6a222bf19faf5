"""Map YouTube Data API v3 ``videos.list`` items onto raw items."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from ..core.models import RawItem
from .innertube import VIDEO_ID_RE


def _best_thumbnail(snippet: dict) -> str:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("maxres", "high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def video_item_to_raw(item: dict) -> Optional[RawItem]:
    video_id = item.get("id")
    if not isinstance(video_id, str) or not VIDEO_ID_RE.match(video_id):
        return None
    snippet = item.get("snippet") or {}
    content = item.get("contentDetails") or {}
    stats = item.get("statistics") or {}
    return RawItem(
        video_id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        channel_name=snippet.get("channelTitle") or "",
        channel_id=snippet.get("channelId") or "",
        view_text=str(stats.get("viewCount") or ""),
        length_text=content.get("duration") or "",
        published_at=snippet.get("publishedAt") or "",
        thumbnail=_best_thumbnail(snippet),
    )


def parse_video_list(response: Any) -> List[RawItem]:
    items: Iterable[Any] = response.get("items", []) if isinstance(response, dict) else []
    parsed = (video_item_to_raw(item) for item in items if isinstance(item, dict))
    return [raw for raw in parsed if raw is not None]
