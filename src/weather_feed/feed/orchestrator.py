"""Concurrent multi-city weather fetch orchestration."""

from __future__ import annotations

import asyncio
import logging

from ..cities import CityListManager
from ..exceptions import WeatherFetchError
from ..models import City, CurrentWeather, DailySummary
from ..persistence import PersistenceStore
from ..units import TemperatureUnit, format_temperature
from ..weather.base import WeatherProvider
from .store import CityWeatherStore

FEED_ERROR_MESSAGE = "Problem loading weather"

_FetchResult = tuple[City, CurrentWeather | None, Exception | None]


class FeedOrchestrator:
    """Fan out per-city weather fetches and fold the results into one store.

    Fetches run as concurrent tasks; their results are applied one at a time
    by the coroutine that started them, so the store only ever has a single
    writer per cycle. Failures set one shared error message and leave the
    failing city's entry absent or stale.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        city_list: CityListManager,
        persistence: PersistenceStore,
        logger: logging.Logger,
        store: CityWeatherStore | None = None,
    ) -> None:
        self.provider = provider
        self.city_list = city_list
        self.persistence = persistence
        self.logger = logger
        self.store = store or CityWeatherStore()
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._temperature_unit = (
            TemperatureUnit.parse(persistence.load_temperature_unit())
            or TemperatureUnit.FAHRENHEIT
        )

    # Feed composition

    @property
    def saved_cities(self) -> list[City]:
        return self.city_list.cities

    @property
    def current_location_city(self) -> City | None:
        location = self.persistence.load_current_location()
        if location is None or not location.city:
            return None
        return City(name=location.city, country_code="")

    @property
    def all_cities(self) -> list[City]:
        """Current location first, then saved cities."""
        current = self.current_location_city
        if current is None:
            return self.saved_cities
        return [current, *self.saved_cities]

    @property
    def is_loading(self) -> bool:
        return self.store.is_loading

    @property
    def last_error(self) -> str | None:
        return self.store.last_error

    def weather(self, city: City) -> CurrentWeather | None:
        return self.store.get(city)

    def has_weather(self, city: City) -> bool:
        return self.store.has_weather(city)

    def forecast(self, city: City) -> list[DailySummary] | None:
        return self.store.get_forecast(city)

    # Units

    @property
    def temperature_unit(self) -> TemperatureUnit:
        return self._temperature_unit

    @temperature_unit.setter
    def temperature_unit(self, unit: TemperatureUnit) -> None:
        self._temperature_unit = unit
        self.persistence.save_temperature_unit(unit.value)

    def display_temperature(self, kelvin: float | None) -> str:
        return format_temperature(kelvin, self._temperature_unit)

    # Feed loading

    async def load_feed(self, cities: list[City] | None = None) -> None:
        """Fetch weather for every city concurrently and wait for all of them."""
        targets = self.all_cities if cities is None else list(cities)
        await self._load_weather(targets)

    async def refresh_feed(self, cities: list[City] | None = None) -> None:
        """Drop all current weather, then load the feed again."""
        self.store.clear_all()
        await self.load_feed(cities)

    # Saved city list

    def add_city(self, city: City) -> bool:
        """Prepend a new city and fetch its weather in the background.

        Returns False without doing anything when an equal city is already
        saved. Must be called with a running event loop; without one it raises
        RuntimeError before the list is touched.
        """
        loop = asyncio.get_running_loop()
        if not self.city_list.add(city):
            return False
        task = loop.create_task(self._load_weather([city]))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return True

    async def wait_for_background(self) -> None:
        """Wait for fetches started by ``add_city``."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))

    def remove_city(self, city: City) -> bool:
        if not self.city_list.remove(city):
            return False
        self.store.clear(city)
        return True

    def reset_cities(self) -> list[City]:
        return self.city_list.reset()

    # Forecasts

    async def load_forecast(self, city: City) -> list[DailySummary] | None:
        """Fetch and store a city's forecast; a failure clears the stored one."""
        try:
            summaries = await self.provider.fetch_forecast(city)
        except WeatherFetchError as exc:
            self.logger.warning(
                "Failed to load forecast for %s: %s",
                city.name,
                exc.message,
                extra={"city": city.query, "status": exc.code.kind},
            )
            self.store.set_forecast(city, None)
            return None
        except Exception:
            self.logger.exception("Unexpected error loading forecast for %s", city.name)
            self.store.set_forecast(city, None)
            return None
        self.store.set_forecast(city, summaries)
        return summaries

    async def refresh_forecast(self, city: City) -> list[DailySummary] | None:
        return await self.load_forecast(city)

    # Internals

    async def _load_weather(self, cities: list[City]) -> None:
        if not cities:
            return

        self.store.is_loading = True
        self.store.clear_error()
        self.logger.info(
            "Loading weather for %d cities", len(cities), extra={"city_count": len(cities)}
        )

        tasks = [asyncio.create_task(self._fetch_weather(city)) for city in cities]
        try:
            for next_result in asyncio.as_completed(tasks):
                self._apply_result(await next_result)
        finally:
            self.store.is_loading = False

    async def _fetch_weather(self, city: City) -> _FetchResult:
        try:
            weather = await self.provider.fetch_current_weather(city)
        except WeatherFetchError as exc:
            self.logger.warning(
                "Weather fetch failed for %s (%s): %s",
                city.query,
                exc.code.kind,
                exc.message,
                extra={"city": city.query, "status": exc.code.kind},
            )
            return city, None, exc
        except Exception as exc:
            self.logger.exception("Unexpected error fetching weather for %s", city.query)
            return city, None, exc
        return city, weather, None

    def _apply_result(self, result: _FetchResult) -> None:
        city, weather, error = result
        if weather is not None:
            self.store.set(city, weather)
            return
        if error is not None:
            self.store.record_error(FEED_ERROR_MESSAGE)
