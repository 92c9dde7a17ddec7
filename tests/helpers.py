"""Shared fakes for weather feed tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from weather_feed.exceptions import STATUS_LOCATION_NOT_FOUND, ProviderError, WeatherFetchError
from weather_feed.location.geo import Geocoder, LocationSource, Placemark, Position
from weather_feed.models import City, CurrentWeather, DailySummary
from weather_feed.weather.base import WeatherProvider


def make_weather(
    name: str,
    temp: float = 290.0,
    condition: str = "Clear",
    description: str = "clear sky",
) -> CurrentWeather:
    return CurrentWeather.model_validate(
        {
            "coord": {"lon": -83.743, "lat": 42.2808},
            "weather": [{"id": 800, "main": condition, "description": description, "icon": "01d"}],
            "base": "stations",
            "main": {
                "temp": temp,
                "feels_like": temp - 1,
                "temp_min": temp - 2,
                "temp_max": temp + 2,
                "pressure": 1013,
                "humidity": 65,
            },
            "visibility": 10000,
            "wind": {"speed": 3.5, "deg": 230},
            "clouds": {"all": 0},
            "dt": 1692112800,
            "sys": {"country": "US", "sunrise": 1692097200, "sunset": 1692148800},
            "timezone": -14400,
            "id": 4984247,
            "name": name,
            "cod": 200,
        }
    )


def make_summary(date: str, temp_min: float = 280.0, temp_max: float = 290.0) -> DailySummary:
    return DailySummary(
        date=date,
        temp_min=temp_min,
        temp_max=temp_max,
        condition="Clouds",
        description="broken clouds",
        icon="04d",
    )


class FakeWeatherProvider(WeatherProvider):
    """In-memory provider keyed by lower-cased city name."""

    def __init__(
        self,
        weather: dict[str, CurrentWeather] | None = None,
        forecasts: dict[str, list[DailySummary]] | None = None,
        failures: dict[str, WeatherFetchError | Exception] | None = None,
        forecast_failures: dict[str, WeatherFetchError] | None = None,
        delays: dict[str, float] | None = None,
        on_fetch: Callable[[City], Any] | None = None,
    ) -> None:
        self.weather = weather or {}
        self.forecasts = forecasts or {}
        self.failures = failures or {}
        self.forecast_failures = forecast_failures or {}
        self.delays = delays or {}
        self.on_fetch = on_fetch
        self.weather_calls: list[str] = []
        self.forecast_calls: list[str] = []
        self.closed = False

    async def __aenter__(self) -> FakeWeatherProvider:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.closed = True

    async def fetch_current_weather(self, city: City) -> CurrentWeather:
        key = city.name.lower()
        self.weather_calls.append(city.name)
        delay = self.delays.get(key, 0.0)
        if delay:
            await asyncio.sleep(delay)
        if self.on_fetch is not None:
            self.on_fetch(city)
        if key in self.failures:
            raise self.failures[key]
        if key not in self.weather:
            raise ProviderError(STATUS_LOCATION_NOT_FOUND, f"City '{city.name}' not found")
        return self.weather[key]

    async def fetch_forecast(self, city: City) -> list[DailySummary]:
        key = city.name.lower()
        self.forecast_calls.append(city.name)
        if key in self.forecast_failures:
            raise self.forecast_failures[key]
        if key not in self.forecasts:
            raise ProviderError(STATUS_LOCATION_NOT_FOUND, "Forecast not found")
        return self.forecasts[key]


class FakeGeocoder(Geocoder):
    """Returns queued results in order; exceptions in the queue are raised."""

    def __init__(self, results: list[Placemark | Exception | None]) -> None:
        self.results = list(results)
        self.calls: list[Position] = []

    async def reverse_geocode(self, position: Position) -> Placemark | None:
        self.calls.append(position)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeLocationSource(LocationSource):
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.permission_requests = 0

    def start_updates(self) -> None:
        self.starts += 1

    def stop_updates(self) -> None:
        self.stops += 1

    def request_permission(self) -> None:
        self.permission_requests += 1
