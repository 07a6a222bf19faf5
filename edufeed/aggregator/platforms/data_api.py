from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

from googleapiclient.discovery import build  # type: ignore
from googleapiclient.errors import HttpError  # type: ignore

from ..core.models import ChannelInfo, RawItem
from ..core.utils import format_count
from ..parsers.data_api import parse_video_list

logger = logging.getLogger(__name__)

EDUCATION_CATEGORY_ID = "27"


class DataApiClient:
    """Official YouTube Data API v3, used ahead of the scraping transports when a key is set."""

    def __init__(self, api_key: Optional[str], *, service: Any = None, language: str = "en"):
        if service is None and not api_key:
            raise ValueError("YOUTUBE_API_KEY not configured")
        self.client = service or build("youtube", "v3", developerKey=api_key, cache_discovery=False)
        self.language = language

    async def _execute(self, request: Any) -> dict:
        return await asyncio.to_thread(request.execute)

    async def _hydrate(self, ids: List[str]) -> List[RawItem]:
        if not ids:
            return []
        dreq = self.client.videos().list(part="snippet,contentDetails,statistics", id=",".join(ids))
        return parse_video_list(await self._execute(dreq))

    async def search(self, query: str, limit: int = 20) -> List[RawItem]:
        try:
            sreq = self.client.search().list(
                q=query,
                part="id",
                type="video",
                relevanceLanguage=self.language,
                safeSearch="strict",
                maxResults=min(50, limit),
            )
            sres = await self._execute(sreq)
            ids = [x["id"]["videoId"] for x in sres.get("items", []) if x.get("id", {}).get("videoId")]
            return await self._hydrate(ids)
        except HttpError as e:
            logger.warning("Data API search HTTP issue: %s", e)
        except Exception as e:
            logger.error("Data API search error: %s", e)
        return []

    async def video(self, video_id: str) -> List[RawItem]:
        """Single-video lookup; a list so it fits the fallback chain contract."""
        try:
            return await self._hydrate([video_id])
        except HttpError as e:
            logger.warning("Data API video lookup failed for %s: %s", video_id, e)
        except Exception as e:
            logger.error("Data API video lookup error for %s: %s", video_id, e)
        return []

    async def popular(self, limit: int = 20) -> List[RawItem]:
        """Most popular videos in the Education category."""
        try:
            req = self.client.videos().list(
                part="snippet,contentDetails,statistics",
                chart="mostPopular",
                videoCategoryId=EDUCATION_CATEGORY_ID,
                maxResults=min(50, limit),
            )
            return parse_video_list(await self._execute(req))
        except HttpError as e:
            logger.warning("Data API popular chart HTTP issue: %s", e)
        except Exception as e:
            logger.error("Data API popular chart error: %s", e)
        return []

    async def channel_info(self, channel_id: str) -> Optional[ChannelInfo]:
        try:
            req = self.client.channels().list(part="snippet,statistics", id=channel_id)
            res = await self._execute(req)
        except HttpError as e:
            logger.warning("Data API channel lookup failed for %s: %s", channel_id, e)
            return None
        except Exception as e:
            logger.error("Data API channel lookup error for %s: %s", channel_id, e)
            return None

        items = res.get("items", [])
        if not items:
            logger.info("No items returned for YouTube channel %s", channel_id)
            return None
        channel = items[0]
        snippet = channel.get("snippet") or {}
        stats = channel.get("statistics") or {}
        subscribers = stats.get("subscriberCount")
        return ChannelInfo(
            id=channel.get("id") or channel_id,
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            thumbnail=((snippet.get("thumbnails") or {}).get("medium") or {}).get("url") or "",
            subscriber_count=format_count(int(subscribers)) if str(subscribers or "").isdigit() else "",
            video_count=str(stats.get("videoCount") or ""),
        )
