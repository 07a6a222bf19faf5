"""Transport clients; each returns raw items and never raises past its boundary."""

from .data_api import DataApiClient
from .feed import FeedClient
from .innertube import InnertubeClient
from .scrape import PageScraper

__all__ = ["DataApiClient", "FeedClient", "InnertubeClient", "PageScraper"]
