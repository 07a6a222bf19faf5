"""YouTube content aggregation: transports, parsers and the orchestrator."""

from .core.models import Category, ChannelInfo, ChannelSummary, PlaylistSummary, RawItem, Video
from .discovery import discover_categories, discover_educational_channels, discover_educational_playlists
from .pipeline import ContentAggregator, run_sync

__all__ = [
    "Category",
    "ChannelInfo",
    "ChannelSummary",
    "ContentAggregator",
    "PlaylistSummary",
    "RawItem",
    "Video",
    "discover_categories",
    "discover_educational_channels",
    "discover_educational_playlists",
    "run_sync",
]
