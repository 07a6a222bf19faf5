"""Response parsers, one per upstream document shape."""

from .data_api import parse_video_list
from .feed import parse_feed, parse_feed_title
from .innertube import VIDEO_ID_RE, dig, parse_search_playlists, parse_video_details, parse_video_items
from .page import extract_initial_data, extract_player_response, sweep_video_ids, unescape_hex

__all__ = [
    "VIDEO_ID_RE",
    "dig",
    "extract_initial_data",
    "extract_player_response",
    "parse_feed",
    "parse_feed_title",
    "parse_search_playlists",
    "parse_video_details",
    "parse_video_items",
    "parse_video_list",
    "sweep_video_ids",
    "unescape_hex",
]
