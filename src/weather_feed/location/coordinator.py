"""Ambient current-location tracking and its weather."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..exceptions import GeocodingError, PermissionDeniedError, PersistenceError, WeatherFetchError
from ..models import City, CurrentWeather, DailySummary, LocationData, WeatherCondition
from ..persistence import PersistenceStore
from ..units import kelvin_to_celsius, kelvin_to_fahrenheit
from ..weather.base import WeatherProvider
from .geo import GeocodeThrottle, Geocoder, LocationSource, PermissionState, Position, PositionFix


@dataclass(frozen=True, slots=True)
class PermissionChanged:
    state: PermissionState


@dataclass(frozen=True, slots=True)
class PositionUpdated:
    fix: PositionFix


LocationEvent = PermissionChanged | PositionUpdated


class LocationWeatherCoordinator:
    """Track one ambient location and keep its weather and forecast current.

    Permission and position events are queued and handled one at a time by
    ``run()``, so no two events ever mutate the ambient state concurrently.
    Failures reset the affected state instead of propagating.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        geocoder: Geocoder,
        location_source: LocationSource,
        persistence: PersistenceStore,
        logger: logging.Logger,
        *,
        throttle: GeocodeThrottle | None = None,
        initial_status: PermissionState = PermissionState.UNDETERMINED,
    ) -> None:
        self.provider = provider
        self.geocoder = geocoder
        self.location_source = location_source
        self.persistence = persistence
        self.logger = logger
        self.throttle = throttle or GeocodeThrottle()
        self.status = initial_status

        self.latitude: float | None = None
        self.longitude: float | None = None
        self.city_name: str | None = None
        self.current_weather: CurrentWeather | None = None
        self.forecast: list[DailySummary] | None = None
        self.updating = False

        self._events: asyncio.Queue[LocationEvent | None] = asyncio.Queue()

        self._restore_persisted_location()
        if self.status.is_authorized:
            self._start_updates()

    # Derived values

    @property
    def position(self) -> Position | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Position(self.latitude, self.longitude)

    @property
    def current_location_city(self) -> City | None:
        if not self.city_name:
            return None
        return City(name=self.city_name, country_code="")

    @property
    def current_condition(self) -> WeatherCondition | None:
        if self.current_weather is None:
            return None
        return self.current_weather.primary_condition

    @property
    def current_temperature_celsius(self) -> int | None:
        if self.current_weather is None:
            return None
        return int(kelvin_to_celsius(self.current_weather.temperature))

    @property
    def current_temperature_fahrenheit(self) -> int | None:
        if self.current_weather is None:
            return None
        return int(kelvin_to_fahrenheit(self.current_weather.temperature))

    # Event intake

    def request_permission(self) -> None:
        self.location_source.request_permission()

    def post_permission(self, state: PermissionState) -> None:
        self._events.put_nowait(PermissionChanged(state))

    def post_position(self, fix: PositionFix) -> None:
        self._events.put_nowait(PositionUpdated(fix))

    def stop(self) -> None:
        """Ask ``run()`` to return after the events already queued."""
        self._events.put_nowait(None)

    async def run(self) -> None:
        """Consume queued events until ``stop()`` is called."""
        while True:
            event = await self._events.get()
            try:
                if event is None:
                    return
                await self.handle(event)
            except Exception:
                self.logger.exception("Failed handling location event %r", event)
            finally:
                self._events.task_done()

    async def handle(self, event: LocationEvent) -> None:
        if isinstance(event, PermissionChanged):
            self._apply_permission(event.state)
        elif isinstance(event, PositionUpdated):
            await self._apply_fix(event.fix)

    async def refresh(self) -> None:
        """Re-fetch weather and forecast for the known location."""
        if self.status.is_blocked:
            raise PermissionDeniedError(f"Location access is {self.status.value}.")
        if self.city_name is None:
            self.logger.info("No current location resolved yet; nothing to refresh")
            return
        await self._fetch_location_weather()

    # Permission handling

    def _apply_permission(self, state: PermissionState) -> None:
        self.status = state
        if state.is_authorized:
            self._start_updates()
        elif state.is_blocked:
            self.logger.info("Location access %s; clearing current location", state.value)
            self._stop_updates()
            self._clear_location()

    def _clear_location(self) -> None:
        self.city_name = None
        self.latitude = None
        self.longitude = None
        self.current_weather = None
        self.forecast = None
        self._save_location(None)

    # Position handling

    async def _apply_fix(self, fix: PositionFix) -> None:
        if self.status.is_blocked:
            self.logger.debug("Ignoring position fix while location access is %s", self.status.value)
            return
        self.latitude = fix.position.latitude
        self.longitude = fix.position.longitude

        if self.throttle.allows(fix) or self.city_name is None:
            await self._reverse_geocode(fix)
            return

        if self.current_weather is None:
            await self._fetch_location_weather()
        # City and weather are both known; stop until the next explicit start.
        self._stop_updates()

    async def _reverse_geocode(self, fix: PositionFix) -> None:
        self.throttle.record(fix)
        try:
            placemark = await self.geocoder.reverse_geocode(fix.position)
        except GeocodingError as exc:
            self.logger.warning("Reverse geocoding failed: %s", exc)
            self._reset_after_geocode_failure()
            return
        except Exception:
            self.logger.exception("Unexpected reverse geocoding failure")
            self._reset_after_geocode_failure()
            return

        if placemark is None:
            self.logger.debug("Reverse geocoding returned no placemark")
            return

        new_name = placemark.display_name
        if new_name != self.city_name:
            self.logger.info("Current location resolved to %s", new_name)
            self.city_name = new_name
            self._persist_location()
            await self._fetch_location_weather()
        elif self.current_weather is None:
            await self._fetch_location_weather()

    def _reset_after_geocode_failure(self) -> None:
        # Forecast is intentionally left as is.
        self.city_name = None
        self.current_weather = None

    async def _fetch_location_weather(self) -> None:
        city = self.current_location_city
        if city is None:
            return
        try:
            self.current_weather = await self.provider.fetch_current_weather(city)
        except WeatherFetchError as exc:
            self.logger.warning("Current location weather failed for %s: %s", city.name, exc.message)
            self.current_weather = None
            self.forecast = None
            return
        except Exception:
            self.logger.exception("Unexpected error fetching current location weather")
            self.current_weather = None
            self.forecast = None
            return
        await self._fetch_location_forecast(city)

    async def _fetch_location_forecast(self, city: City) -> None:
        try:
            self.forecast = await self.provider.fetch_forecast(city)
        except WeatherFetchError as exc:
            self.logger.warning("Current location forecast failed for %s: %s", city.name, exc.message)
            self.forecast = None
        except Exception:
            self.logger.exception("Unexpected error fetching current location forecast")
            self.forecast = None

    def _persist_location(self) -> None:
        if self.city_name is None or self.latitude is None or self.longitude is None:
            return
        self._save_location(
            LocationData(city=self.city_name, latitude=self.latitude, longitude=self.longitude)
        )

    def _save_location(self, location: LocationData | None) -> None:
        try:
            self.persistence.save_current_location(location)
        except PersistenceError as exc:
            self.logger.warning("Failed to persist current location: %s", exc)

    def _restore_persisted_location(self) -> None:
        saved = self.persistence.load_current_location()
        if saved is None:
            return
        self.city_name = saved.city
        self.latitude = saved.latitude
        self.longitude = saved.longitude

    def _start_updates(self) -> None:
        self.updating = True
        self.location_source.start_updates()

    def _stop_updates(self) -> None:
        self.updating = False
        self.location_source.stop_updates()
