from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from ...config import AppConfig
from ..core.http import fetch_text
from ..core.models import RawItem
from ..parsers.innertube import parse_video_details, parse_video_items
from ..parsers.page import extract_initial_data, extract_player_response, sweep_video_ids

logger = logging.getLogger(__name__)

BASE_URL = "https://www.youtube.com"


class PageScraper:
    """Scrape the ``ytInitialData`` blob embedded in public youtube.com pages."""

    def __init__(self, http: httpx.AsyncClient, config: AppConfig):
        self.http = http
        self.config = config

    async def _scrape(self, url: str, params: Optional[dict[str, str]] = None) -> List[RawItem]:
        try:
            html = await fetch_text(self.http, url, params=params, attempts=self.config.fetch_attempts)
        except httpx.HTTPStatusError as e:
            logger.warning("Scrape of %s returned HTTP %s", url, e.response.status_code)
            return []
        except httpx.HTTPError as e:
            logger.warning("Scrape of %s failed: %s", url, e)
            return []

        data = extract_initial_data(html)
        items = parse_video_items(data) if data is not None else []
        if items:
            return items
        swept = sweep_video_ids(html)
        if swept:
            logger.info("ytInitialData unusable for %s; recovered %d bare ids", url, len(swept))
        return swept

    async def search(self, query: str) -> List[RawItem]:
        return await self._scrape(f"{BASE_URL}/results", {"search_query": query})

    async def playlist(self, playlist_id: str) -> List[RawItem]:
        return await self._scrape(f"{BASE_URL}/playlist", {"list": playlist_id})

    async def channel(self, channel_id: str) -> List[RawItem]:
        return await self._scrape(f"{BASE_URL}/channel/{quote(channel_id, safe='')}/videos")

    async def watch(self, video_id: str) -> List[RawItem]:
        """Single video from the watch page's player response; never swept."""
        try:
            html = await fetch_text(
                self.http, f"{BASE_URL}/watch", params={"v": video_id}, attempts=self.config.fetch_attempts
            )
        except httpx.HTTPError as e:
            logger.warning("Watch page for %s failed: %s", video_id, e)
            return []
        data = extract_player_response(html)
        raw = parse_video_details(data) if data is not None else None
        return [raw] if raw is not None else []
