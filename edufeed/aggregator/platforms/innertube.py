from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ...config import AppConfig
from ..core.models import PlaylistSummary, RawItem
from ..parsers.innertube import parse_search_playlists, parse_video_details, parse_video_items

logger = logging.getLogger(__name__)

INNERTUBE_BASE = "https://www.youtube.com/youtubei/v1"
PLAYLIST_FILTER = "EgIQAw=="
CHANNEL_VIDEOS_TAB = "EgZ2aWRlb3PyBgQKAjoA"


class InnertubeClient:
    """Structured client for youtube.com's internal JSON API.

    A non-2xx status fails the attempt outright; there is no internal retry,
    the caller's fallback chain decides what to try next.
    """

    def __init__(self, http: httpx.AsyncClient, config: AppConfig):
        self.http = http
        self.config = config

    async def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = {"context": self.config.innertube_context, **body}
        response = await self.http.post(
            f"{INNERTUBE_BASE}/{endpoint}",
            params={"key": self.config.innertube_api_key, "prettyPrint": "false"},
            json=payload,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected {endpoint} payload type {type(data).__name__}")
        return data

    async def _post_safely(self, endpoint: str, body: dict[str, Any]) -> Optional[dict[str, Any]]:
        try:
            return await self._post(endpoint, body)
        except httpx.HTTPStatusError as e:
            logger.warning("Innertube %s returned HTTP %s", endpoint, e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning("Innertube %s request failed: %s", endpoint, e)
        except ValueError as e:
            logger.warning("Innertube %s response undecodable: %s", endpoint, e)
        return None

    async def search(self, query: str) -> List[RawItem]:
        data = await self._post_safely("search", {"query": query})
        items = parse_video_items(data) if data else []
        logger.debug("Innertube search %r yielded %d items", query, len(items))
        return items

    async def search_playlists(self, query: str) -> List[PlaylistSummary]:
        data = await self._post_safely("search", {"query": query, "params": PLAYLIST_FILTER})
        return parse_search_playlists(data) if data else []

    async def browse_playlist(self, playlist_id: str) -> List[RawItem]:
        browse_id = playlist_id if playlist_id.startswith("VL") else f"VL{playlist_id}"
        data = await self._post_safely("browse", {"browseId": browse_id})
        return parse_video_items(data) if data else []

    async def browse_channel(self, channel_id: str) -> List[RawItem]:
        data = await self._post_safely("browse", {"browseId": channel_id, "params": CHANNEL_VIDEOS_TAB})
        return parse_video_items(data) if data else []

    async def player(self, video_id: str) -> List[RawItem]:
        data = await self._post_safely("player", {"videoId": video_id})
        raw = parse_video_details(data) if data else None
        return [raw] if raw is not None else []
