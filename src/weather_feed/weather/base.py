"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import City, CurrentWeather, DailySummary


class WeatherProvider(ABC):
    """Base contract for weather providers used by the feed and location flows."""

    @abstractmethod
    async def fetch_current_weather(self, city: City) -> CurrentWeather:
        """Fetch current conditions for a city, raising WeatherFetchError on failure."""

    @abstractmethod
    async def fetch_forecast(self, city: City) -> list[DailySummary]:
        """Fetch up to five daily summaries for a city, raising WeatherFetchError on failure."""

    async def aclose(self) -> None:
        """Release provider resources."""
