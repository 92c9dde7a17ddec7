"""Weather provider integrations."""

from .aggregator import aggregate_forecast, summarize_samples
from .base import WeatherProvider
from .openweather import OpenWeatherProvider

__all__ = [
    "OpenWeatherProvider",
    "WeatherProvider",
    "aggregate_forecast",
    "summarize_samples",
]
