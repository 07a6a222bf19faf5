from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Optional, Sequence

from ..config import load_config
from ..logging_utils import configure_logging
from .discovery import discover_categories, discover_educational_channels, discover_educational_playlists
from .pipeline import ContentAggregator

logger = logging.getLogger(__name__)


async def main_async(args: argparse.Namespace) -> list[dict[str, Any]]:
    config = load_config()
    configure_logging(config, to_file=not args.no_log_file)
    free_only = not args.include_paid

    async with ContentAggregator(config) as aggregator:
        if args.trending:
            results: Sequence[Any] = await aggregator.get_trending_content(free_only)
        elif args.recommend is not None:
            prefs = [p.strip() for p in args.recommend.split(",") if p.strip()]
            results = await aggregator.get_recommended_content(prefs, free_only)
        elif args.playlist:
            results = await aggregator.get_playlist_videos(args.playlist, free_only)
        elif args.channel:
            results = await aggregator.get_channel_videos(args.channel, free_only)
        elif args.discover == "categories":
            results = await discover_categories(aggregator)
        elif args.discover == "channels":
            results = await discover_educational_channels(aggregator)
        elif args.discover == "playlists":
            results = await discover_educational_playlists(aggregator)
        else:
            results = await aggregator.get_aggregated_content(args.search, args.category, free_only)

    logger.info("Returned %d results", len(results))
    return [item.model_dump(by_alias=True) for item in results]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Educational YouTube aggregator (async, fail-soft)")
    p.add_argument("--search", help="Free-text search; biased towards tutorials")
    p.add_argument("--category", help="Category name, or 'all'")
    p.add_argument("--trending", action="store_true")
    p.add_argument("--recommend", help="Comma-separated preference terms ('' for discovery)")
    p.add_argument("--playlist", help="Playlist id")
    p.add_argument("--channel", help="Channel id (UC...)")
    p.add_argument("--discover", choices=("categories", "channels", "playlists"))
    p.add_argument("--include-paid", action="store_true", help="Disable the free-content filter")
    p.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    payload = asyncio.run(main_async(args))
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
