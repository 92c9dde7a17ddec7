"""Logging setup for the weather feed."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_text

# Attributes passed through ``extra=`` that are copied into the JSON event.
CONTEXT_FIELDS: tuple[str, ...] = ("city", "status", "endpoint", "http_status", "city_count")


class JsonConsoleFormatter(logging.Formatter):
    """JSON console formatter carrying per-city request context."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            event[field] = sanitize_text(value) if isinstance(value, str) else value
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str, ensure_ascii=False)


def setup_logger(name: str = "weather_feed", level: int | str = logging.INFO) -> logging.Logger:
    """Return the feed logger with a single JSON stderr handler attached."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if any(isinstance(handler.formatter, JsonConsoleFormatter) for handler in logger.handlers):
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
