from __future__ import annotations

import logging
from typing import List

import httpx

from ...config import AppConfig
from ..core.http import fetch_text
from ..core.models import RawItem
from ..parsers.feed import parse_feed, parse_feed_title

logger = logging.getLogger(__name__)

FEED_URL = "https://www.youtube.com/feeds/videos.xml"


class FeedClient:
    """Public Atom feeds; only covers playlist and channel listings, never search."""

    def __init__(self, http: httpx.AsyncClient, config: AppConfig):
        self.http = http
        self.config = config

    async def _fetch(self, params: dict[str, str]) -> str:
        try:
            return await fetch_text(self.http, FEED_URL, params=params, attempts=self.config.fetch_attempts)
        except httpx.HTTPStatusError as e:
            logger.warning("Feed %s returned HTTP %s", params, e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning("Feed %s request failed: %s", params, e)
        return ""

    async def playlist(self, playlist_id: str) -> List[RawItem]:
        return parse_feed(await self._fetch({"playlist_id": playlist_id}))

    async def channel(self, channel_id: str) -> List[RawItem]:
        return parse_feed(await self._fetch({"channel_id": channel_id}))

    async def channel_title(self, channel_id: str) -> str:
        xml_text = await self._fetch({"channel_id": channel_id})
        return parse_feed_title(xml_text) if xml_text else ""
