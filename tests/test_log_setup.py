from __future__ import annotations

import json
import logging

from weather_feed.log_setup import JsonConsoleFormatter, setup_logger


def _record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="weather_feed",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_includes_request_context_and_redacts() -> None:
    record = _record(
        "OpenWeather current weather failed for Lisbon,PT (HTTP 401) appid=abc123",
        city="Lisbon,PT",
        endpoint="current weather",
        http_status=401,
        unrelated="dropped",
    )

    event = json.loads(JsonConsoleFormatter().format(record))

    assert event["level"] == "WARNING"
    assert event["logger"] == "weather_feed"
    assert event["city"] == "Lisbon,PT"
    assert event["endpoint"] == "current weather"
    assert event["http_status"] == 401
    assert "unrelated" not in event
    assert "abc123" not in event["message"]
    assert "appid=[REDACTED]" in event["message"]


def test_formatter_omits_missing_context() -> None:
    event = json.loads(JsonConsoleFormatter().format(_record("Loading weather for 3 cities")))

    assert set(event) == {"ts", "level", "logger", "message"}


def test_setup_logger_attaches_one_json_handler() -> None:
    logger = setup_logger("weather_feed.test_log_setup", level="DEBUG")
    again = setup_logger("weather_feed.test_log_setup")

    assert again is logger
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JsonConsoleFormatter)
    assert logger.propagate is False
    assert logger.level == logging.INFO
