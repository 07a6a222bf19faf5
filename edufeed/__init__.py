"""Educational video aggregation over YouTube's public surfaces."""

from .aggregator import ContentAggregator, Video
from .config import AppConfig, ConfigError, load_config

__all__ = ["AppConfig", "ConfigError", "ContentAggregator", "Video", "load_config"]
