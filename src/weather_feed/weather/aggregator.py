"""Collapse 3-hour forecast samples into daily summaries."""

from __future__ import annotations

from collections import Counter
from typing import Any

from ..exceptions import ParseError, StatusCode
from ..models import DailySummary

MAX_FORECAST_DAYS = 5


def aggregate_forecast(payload: Any) -> list[DailySummary]:
    """Summarize an OpenWeather forecast body into at most five days.

    Raises ParseError when the body carries no ``list`` array.
    """
    samples = payload.get("list") if isinstance(payload, dict) else None
    if not isinstance(samples, list):
        raise ParseError(StatusCode.other("No list in response"), "Malformed forecast data")
    return summarize_samples(samples)


def summarize_samples(samples: list[Any]) -> list[DailySummary]:
    """Group samples by ``dt_txt`` date and build one summary per date.

    Samples keep their input order inside each group; condition tie-breaks
    depend on it.
    """
    grouped: dict[str, list[dict[str, Any]]] = {}
    for sample in samples:
        if not isinstance(sample, dict):
            continue
        dt_txt = sample.get("dt_txt")
        if not isinstance(dt_txt, str):
            continue
        grouped.setdefault(dt_txt[:10], []).append(sample)

    return [
        _summarize_day(day, grouped[day])
        for day in sorted(grouped)[:MAX_FORECAST_DAYS]
    ]


def _summarize_day(day: str, samples: list[dict[str, Any]]) -> DailySummary:
    temps = [temp for temp in (_temperature(sample) for sample in samples) if temp is not None]

    conditions: list[str] = []
    description: str | None = None
    icon: str | None = None
    for sample in samples:
        weather = _first_weather(sample)
        if weather is None:
            continue
        conditions.append(_as_str(weather.get("main")))
        if description is None:
            # First sample with a weather entry wins, independent of the dominant condition.
            description = _as_str(weather.get("description"))
            icon = _as_str(weather.get("icon"))

    return DailySummary(
        date=day,
        temp_min=min(temps) if temps else 0.0,
        temp_max=max(temps) if temps else 0.0,
        condition=dominant_condition(conditions),
        description=description or "",
        icon=icon or "",
    )


def dominant_condition(conditions: list[str]) -> str:
    """Most frequent condition; ties go to the first one to reach the top count."""
    if not conditions:
        return ""
    top_count = max(Counter(conditions).values())
    running: Counter[str] = Counter()
    for condition in conditions:
        running[condition] += 1
        if running[condition] == top_count:
            return condition
    return ""


def _temperature(sample: dict[str, Any]) -> float | None:
    main = sample.get("main")
    if not isinstance(main, dict):
        return None
    value = main.get("temp")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _first_weather(sample: dict[str, Any]) -> dict[str, Any] | None:
    weather = sample.get("weather")
    if not isinstance(weather, list) or not weather:
        return None
    first = weather[0]
    return first if isinstance(first, dict) else None


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
