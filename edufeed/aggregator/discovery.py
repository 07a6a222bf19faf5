"""Heuristic seeding of categories, channels and playlists from search results.

Nothing here is an authoritative taxonomy: the helpers pattern-match over
whatever the discovery query returns and never raise.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from .core.models import Category, ChannelSummary, PlaylistSummary
from .pipeline import ContentAggregator

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS: Dict[str, tuple[str, ...]] = {
    "Programming": ("programming", "coding", "developer", "software", "web development", "python", "javascript"),
    "Mathematics": ("math", "mathematics", "algebra", "calculus", "geometry", "statistics"),
    "Science": ("science", "physics", "chemistry", "biology", "astronomy"),
    "History": ("history", "historical", "ancient", "medieval"),
    "Languages": ("language", "english", "spanish", "french", "german", "japanese"),
    "Arts": ("art", "drawing", "painting", "music", "design"),
    "Business": ("business", "marketing", "finance", "entrepreneurship", "management"),
    "Health": ("health", "fitness", "nutrition", "medicine", "anatomy"),
}


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    return any(re.search(rf"\b{re.escape(keyword)}s?\b", text) for keyword in keywords)


async def discover_categories(aggregator: ContentAggregator) -> List[Category]:
    """Categories with at least one matching discovery result, most hits first."""
    try:
        videos = await aggregator.get_aggregated_content()
    except Exception:
        logger.exception("Category discovery failed")
        videos = []

    counts = {name: 0 for name in CATEGORY_KEYWORDS}
    for video in videos:
        text = f"{video.title} {video.description}".lower()
        for name, keywords in CATEGORY_KEYWORDS.items():
            if _matches(text, keywords):
                counts[name] += 1

    bias = aggregator.config.search_bias_term
    categories = [
        Category(name=name, query=f"{name} {bias}".strip(), video_count=count)
        for name, count in counts.items()
    ]
    hits = [category for category in categories if category.video_count > 0]
    if not hits:
        logger.info("No category keywords matched %d discovery results; returning full table", len(videos))
        return categories
    return sorted(hits, key=lambda category: category.video_count, reverse=True)


async def discover_educational_channels(aggregator: ContentAggregator, limit: int = 10) -> List[ChannelSummary]:
    """Unique channels seen in discovery results, in first-seen order."""
    try:
        videos = await aggregator.get_aggregated_content()
    except Exception:
        logger.exception("Channel discovery failed")
        return []

    channels: Dict[str, ChannelSummary] = {}
    for video in videos:
        if not video.channel_id:
            continue
        summary = channels.get(video.channel_id)
        if summary is None:
            channels[video.channel_id] = ChannelSummary(
                id=video.channel_id,
                name=video.channel_name,
                thumbnail=video.thumbnail,
                video_count=1,
            )
        else:
            summary.video_count += 1
    return list(channels.values())[:limit]


async def discover_educational_playlists(aggregator: ContentAggregator, limit: int = 10) -> List[PlaylistSummary]:
    """Playlists returned by a playlist-filtered discovery search."""
    playlists = await aggregator.search_playlists(aggregator.config.discover_query)
    seen: set[str] = set()
    unique: List[PlaylistSummary] = []
    for playlist in playlists:
        if playlist.id in seen:
            continue
        seen.add(playlist.id)
        unique.append(playlist)
    return unique[:limit]
