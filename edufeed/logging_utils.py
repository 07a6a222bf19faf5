"""Console and rotating JSON-file logging for edufeed runs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from typing import Any, Optional

from .config import AppConfig

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-7s | %(component)s | %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "googleapiclient.discovery_cache")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra_fields`` are merged into the object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": getattr(record, "component", record.name),
            "environment": getattr(record, "environment", "unknown"),
            "event": getattr(record, "event", record.funcName),
            "message": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextFilter(logging.Filter):
    """Stamps environment, event and a short component name on each record."""

    def __init__(self, environment: str) -> None:
        super().__init__()
        self._environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.environment = self._environment
        record.event = getattr(record, "event", record.funcName)
        # "edufeed.aggregator.platforms.innertube" -> "innertube"
        record.component = record.name.rsplit(".", 1)[-1]
        return True


def _console_handler(context_filter: ContextFilter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    handler.addFilter(context_filter)
    return handler


def _file_handler(config: AppConfig, context_filter: ContextFilter) -> logging.Handler:
    config.ensure_runtime_directories()
    handler = TimedRotatingFileHandler(
        filename=str(config.log_path),
        when="midnight",
        backupCount=7,
        utc=True,
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    handler.addFilter(context_filter)
    return handler


def configure_logging(config: AppConfig, *, to_file: bool = True, level: Optional[int] = None) -> None:
    """Replace the root handlers with console output and, optionally, a JSON log file.

    Development runs log at DEBUG so every fallback step is visible; other
    environments log at INFO unless ``level`` overrides it.
    """
    if level is None:
        level = logging.DEBUG if config.environment == "development" else logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    context_filter = ContextFilter(config.environment)
    root.addHandler(_console_handler(context_filter))
    if to_file:
        root.addHandler(_file_handler(config, context_filter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
