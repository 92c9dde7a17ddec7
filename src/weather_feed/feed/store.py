"""In-memory per-city weather and forecast state."""

from __future__ import annotations

from ..models import City, CurrentWeather, DailySummary


class CityWeatherStore:
    """Keyed weather state plus the feed-wide loading/error flags.

    Has no locking of its own; a single owner applies every write. A city
    missing from the weather mapping was either never fetched or failed; the
    two cases are not distinguished.
    """

    def __init__(self) -> None:
        self._weather: dict[City, CurrentWeather] = {}
        self._forecasts: dict[City, list[DailySummary]] = {}
        self.is_loading = False
        self.last_error: str | None = None

    def set(self, city: City, weather: CurrentWeather) -> None:
        self._weather[city] = weather

    def clear(self, city: City) -> None:
        self._weather.pop(city, None)

    def get(self, city: City) -> CurrentWeather | None:
        return self._weather.get(city)

    def has_weather(self, city: City) -> bool:
        return city in self._weather

    def clear_all(self) -> None:
        """Drop every current-weather entry; forecasts are kept."""
        self._weather.clear()

    def set_forecast(self, city: City, summaries: list[DailySummary] | None) -> None:
        if summaries is None:
            self._forecasts.pop(city, None)
        else:
            self._forecasts[city] = list(summaries)

    def get_forecast(self, city: City) -> list[DailySummary] | None:
        summaries = self._forecasts.get(city)
        return list(summaries) if summaries is not None else None

    def weather_snapshot(self) -> dict[City, CurrentWeather]:
        return dict(self._weather)

    def record_error(self, message: str) -> bool:
        """Keep the first error of a cycle; returns False when one was already set."""
        if self.last_error is not None:
            return False
        self.last_error = message
        return True

    def clear_error(self) -> None:
        self.last_error = None
