"""Temperature units and display-boundary conversions."""

from __future__ import annotations

from datetime import date
from enum import Enum

KELVIN_OFFSET = 273.15


class TemperatureUnit(str, Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is TemperatureUnit.CELSIUS else "°F"

    @classmethod
    def parse(cls, raw: str | None) -> TemperatureUnit | None:
        """Return the unit for a persisted raw value, or None if unknown."""
        if raw is None:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def kelvin_to_fahrenheit(kelvin: float) -> float:
    return kelvin_to_celsius(kelvin) * 9 / 5 + 32


def convert_kelvin(kelvin: float, unit: TemperatureUnit) -> float:
    if unit is TemperatureUnit.CELSIUS:
        return kelvin_to_celsius(kelvin)
    return kelvin_to_fahrenheit(kelvin)


def format_temperature(kelvin: float | None, unit: TemperatureUnit) -> str:
    """Render a Kelvin value as a rounded display string, e.g. ``72°F``."""
    if kelvin is None:
        return "-"
    return f"{convert_kelvin(kelvin, unit):.0f}{unit.symbol}"


def short_day_name(value: str) -> str:
    """Weekday abbreviation for a ``YYYY-MM-DD`` date, or "" if unparseable."""
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return ""
    return parsed.strftime("%a")
