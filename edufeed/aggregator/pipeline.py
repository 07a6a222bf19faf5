"""Aggregation orchestrator: query shaping, fallback chains, dedup, filter and sort."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Coroutine, Iterable, List, Optional, Sequence, TypeVar

import httpx
from pydantic import ValidationError

from ..config import AppConfig
from .core.http import build_http_client
from .core.models import ChannelInfo, PlaylistSummary, RawItem, Video
from .core.utils import parse_timestamp, view_count_to_int
from .fallback import Strategy, first_non_empty
from .parsers.innertube import VIDEO_ID_RE
from .platforms import DataApiClient, FeedClient, InnertubeClient, PageScraper

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
T = TypeVar("T")


def dedupe_by_id(videos: Iterable[Video]) -> List[Video]:
    """Drop repeated ids; the first occurrence wins."""
    seen: set[str] = set()
    unique: List[Video] = []
    for video in videos:
        if video.id in seen:
            continue
        seen.add(video.id)
        unique.append(video)
    return unique


def filter_free(videos: List[Video], free_only: bool) -> List[Video]:
    if not free_only:
        return videos
    kept = [video for video in videos if video.is_free]
    removed = len(videos) - len(kept)
    if removed > 0:
        logger.info("Filtered out %d non-free videos.", removed)
    return kept


def sort_by_published(videos: Sequence[Video]) -> List[Video]:
    """Newest first. Records with unparseable dates keep their positions."""
    stamps = [parse_timestamp(video.published_at) for video in videos]
    slots = [index for index, stamp in enumerate(stamps) if stamp is not None]
    ordered = sorted(slots, key=lambda index: stamps[index], reverse=True)
    result = list(videos)
    for slot, source in zip(slots, ordered):
        result[slot] = videos[source]
    return result


def sort_by_views(videos: Sequence[Video]) -> List[Video]:
    """Most viewed first; ties keep their relative order."""
    return sorted(videos, key=lambda video: view_count_to_int(video.views), reverse=True)


def to_videos(raw_items: Iterable[RawItem]) -> List[Video]:
    videos: List[Video] = []
    for raw in raw_items:
        try:
            videos.append(raw.to_video())
        except ValidationError as exc:
            logger.debug("Skipping unusable item %r: %s", raw.video_id, exc.error_count())
    return videos


class ContentAggregator:
    """Educational video aggregation over YouTube's public surfaces.

    Public operations always resolve: upstream failures surface as an empty
    list (or ``None`` for single lookups) and are only visible in the logs.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        data_api: Optional[DataApiClient] = None,
    ) -> None:
        self.config = config or AppConfig()
        self._owns_http = http_client is None
        self.http = http_client or build_http_client(self.config)
        self.innertube = InnertubeClient(self.http, self.config)
        self.feed = FeedClient(self.http, self.config)
        self.scraper = PageScraper(self.http, self.config)
        self.data_api = data_api if data_api is not None else self._build_data_api()

    def _build_data_api(self) -> Optional[DataApiClient]:
        api_key = self.config.data_api_key
        if not api_key:
            return None
        try:
            return DataApiClient(api_key, language=self.config.language)
        except Exception as exc:
            logger.warning("Data API unavailable, using scraping transports only: %s", exc)
            return None

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "ContentAggregator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # Query shaping -------------------------------------------------------

    def _bias(self, text: str) -> str:
        term = self.config.search_bias_term
        cleaned = " ".join(text.split())
        if not term or term.lower() in cleaned.lower():
            return cleaned
        return f"{cleaned} {term}"

    def _cap(self, videos: List[Video], limit: Optional[int] = None) -> List[Video]:
        return videos[: limit or self.config.max_results]

    # Fallback chains -----------------------------------------------------

    async def _run_chain(self, strategies: List[Strategy], label: str) -> List[Video]:
        raw = await first_non_empty(strategies, timeout=self.config.strategy_timeout_seconds, label=label)
        return dedupe_by_id(to_videos(raw))

    async def _search(self, query: str) -> List[Video]:
        strategies: List[Strategy] = []
        if self.data_api is not None:
            strategies.append(Strategy("data_api.search", partial(self.data_api.search, query, self.config.max_results)))
        strategies.append(Strategy("innertube.search", partial(self.innertube.search, query)))
        strategies.append(Strategy("scrape.search", partial(self.scraper.search, query)))
        return await self._run_chain(strategies, f"search {query!r}")

    async def _discover(self) -> List[Video]:
        query = self.config.discover_query
        strategies: List[Strategy] = []
        if self.data_api is not None:
            strategies.append(Strategy("data_api.popular", partial(self.data_api.popular, self.config.max_results)))
        strategies.append(Strategy("innertube.search", partial(self.innertube.search, query)))
        strategies.append(Strategy("scrape.search", partial(self.scraper.search, query)))
        return await self._run_chain(strategies, "discover")

    # Public operations ---------------------------------------------------

    async def get_aggregated_content(
        self,
        search_query: Optional[str] = None,
        category: Optional[str] = None,
        free_only: bool = True,
    ) -> List[Video]:
        """Search, category browse, or general discovery, newest first."""
        try:
            if search_query and search_query.strip():
                videos = await self._search(self._bias(search_query))
            elif category and category.strip() and category.strip().lower() != ALL_CATEGORIES:
                videos = await self._search(self._bias(category))
            else:
                videos = await self._discover()
            videos = filter_free(videos, free_only)
            return self._cap(sort_by_published(videos))
        except Exception:
            logger.exception("Aggregated content failed (query=%r, category=%r)", search_query, category)
            return []

    async def get_trending_content(self, free_only: bool = True) -> List[Video]:
        """Trending-biased search ordered by view count."""
        try:
            videos = await self._search(self.config.trending_query)
            videos = filter_free(videos, free_only)
            return self._cap(sort_by_views(videos))
        except Exception:
            logger.exception("Trending content failed")
            return []

    async def get_recommended_content(
        self,
        preferences: Optional[Sequence[str]] = None,
        free_only: bool = True,
    ) -> List[Video]:
        """One concurrent search per preference, merged in preference order."""
        try:
            terms = [term.strip() for term in preferences or [] if term and term.strip()]
            if not terms:
                videos = await self._discover()
            else:
                results = await asyncio.gather(
                    *(self._search(self._bias(term)) for term in terms),
                    return_exceptions=True,
                )
                merged: List[Video] = []
                for term, result in zip(terms, results):
                    if isinstance(result, BaseException):
                        logger.warning("Preference search %r failed: %s", term, result)
                        continue
                    merged.extend(result)
                videos = dedupe_by_id(merged)
                if not videos:
                    logger.info("No results for preferences %r; using discovery", terms)
                    videos = await self._discover()
            videos = filter_free(videos, free_only)
            return self._cap(sort_by_published(videos))
        except Exception:
            logger.exception("Recommended content failed (preferences=%r)", preferences)
            return []

    async def get_playlist_videos(self, playlist_id: str, free_only: bool = True) -> List[Video]:
        """Playlist entries in playlist order."""
        try:
            strategies = [
                Strategy("innertube.browse", partial(self.innertube.browse_playlist, playlist_id)),
                Strategy("feed.playlist", partial(self.feed.playlist, playlist_id)),
                Strategy("scrape.playlist", partial(self.scraper.playlist, playlist_id)),
            ]
            videos = await self._run_chain(strategies, f"playlist {playlist_id}")
            return self._cap(filter_free(videos, free_only))
        except Exception:
            logger.exception("Playlist retrieval failed for %s", playlist_id)
            return []

    async def get_channel_videos(self, channel_id: str, free_only: bool = True) -> List[Video]:
        """Latest uploads of a channel, newest first as upstream lists them."""
        try:
            strategies = [
                Strategy("innertube.browse", partial(self.innertube.browse_channel, channel_id)),
                Strategy("feed.channel", partial(self.feed.channel, channel_id)),
                Strategy("scrape.channel", partial(self.scraper.channel, channel_id)),
            ]
            videos = await self._run_chain(strategies, f"channel {channel_id}")
            return self._cap(filter_free(videos, free_only))
        except Exception:
            logger.exception("Channel retrieval failed for %s", channel_id)
            return []

    async def search_videos(self, query: str, limit: Optional[int] = None) -> List[Video]:
        """Plain search without the educational bias term, in upstream order."""
        try:
            if not query or not query.strip():
                return []
            return self._cap(await self._search(" ".join(query.split())), limit)
        except Exception:
            logger.exception("Search failed for %r", query)
            return []

    async def search_playlists(self, query: str) -> List[PlaylistSummary]:
        try:
            return await asyncio.wait_for(
                self.innertube.search_playlists(query),
                timeout=self.config.strategy_timeout_seconds,
            )
        except Exception:
            logger.exception("Playlist search failed for %r", query)
            return []

    async def get_video_details(self, video_id: str) -> Optional[Video]:
        """One video by id: Data API when configured, then the player endpoint, then the watch page."""
        try:
            video_id = (video_id or "").strip()
            if not VIDEO_ID_RE.match(video_id):
                logger.warning("Rejected malformed video id %r", video_id)
                return None
            strategies: List[Strategy] = []
            if self.data_api is not None:
                strategies.append(Strategy("data_api.video", partial(self.data_api.video, video_id)))
            strategies.append(Strategy("innertube.player", partial(self.innertube.player, video_id)))
            strategies.append(Strategy("scrape.watch", partial(self.scraper.watch, video_id)))
            videos = await self._run_chain(strategies, f"video {video_id}")
            return next((video for video in videos if video.id == video_id), None)
        except Exception:
            logger.exception("Video lookup failed for %s", video_id)
            return None

    async def get_channel_info(self, channel_id: str) -> Optional[ChannelInfo]:
        try:
            if self.data_api is not None:
                info = await self.data_api.channel_info(channel_id)
                if info is not None:
                    return info
            title = await self.feed.channel_title(channel_id)
            return ChannelInfo(id=channel_id, title=title) if title else None
        except Exception:
            logger.exception("Channel info failed for %s", channel_id)
            return None


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Synchronous entry point; runs on a worker thread when a loop is already active."""

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
