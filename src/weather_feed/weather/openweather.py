"""OpenWeather (api.openweathermap.org) weather provider implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..exceptions import (
    STATUS_LOCATION_NOT_FOUND,
    STATUS_UNAUTHORIZED,
    NetworkError,
    ParseError,
    ProviderError,
    StatusCode,
)
from ..models import City, CurrentWeather, DailySummary
from ..redaction import sanitize_text
from .aggregator import aggregate_forecast
from .base import WeatherProvider


class OpenWeatherProvider(WeatherProvider):
    """Fetches current weather and 5-day forecasts from OpenWeather.

    Uses the free Current Weather (``/data/2.5/weather``) and 5 day / 3 hour
    Forecast (``/data/2.5/forecast``) APIs. Requests are made once; retry
    policy belongs to callers.
    """

    provider_name = "openweather"

    def __init__(
        self,
        settings: Any,
        logger: logging.Logger,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._api_key = settings.openweather_api_key
        self._weather_url = str(settings.openweather_weather_url)
        self._forecast_url = str(settings.openweather_forecast_url)
        self._client = client or httpx.AsyncClient(timeout=settings.weather_timeout_seconds)

    async def __aenter__(self) -> OpenWeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_current_weather(self, city: City) -> CurrentWeather:
        """Fetch current conditions, querying ``name,country`` when a country is known."""
        payload = await self._request_json(
            self._weather_url,
            query=city.query,
            context="current weather",
        )
        try:
            weather = CurrentWeather.model_validate(payload)
        except ValidationError as exc:
            raise ParseError(
                StatusCode.other("invalid_response"),
                f"OpenWeather current weather for '{city.name}' had unexpected shape: "
                f"{exc.error_count()} validation error(s)",
            ) from exc
        self.logger.debug(
            "Parsed current weather for %s: %.2fK", city.query, weather.temperature
        )
        return weather

    async def fetch_forecast(self, city: City) -> list[DailySummary]:
        """Fetch the 3-hour forecast by city name and aggregate it into days."""
        payload = await self._request_json(
            self._forecast_url,
            query=city.name,
            context="forecast",
        )
        summaries = aggregate_forecast(payload)
        self.logger.debug("Aggregated %d forecast days for %s", len(summaries), city.name)
        return summaries

    async def _request_json(self, url: str, *, query: str, context: str) -> Any:
        params = {"q": query, "appid": self._api_key}
        self.logger.info(
            "OpenWeather %s request for %s", context, query, extra={"city": query, "endpoint": context}
        )
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise NetworkError(
                StatusCode.other(type(exc).__name__),
                f"OpenWeather {context} request failed for '{query}': {sanitize_text(str(exc))}",
            ) from exc

        if not response.is_success:
            self._raise_for_status(response, query=query, context=context)

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(
                StatusCode.other("invalid_json"),
                f"OpenWeather {context} returned non-JSON response for '{query}'.",
            ) from exc

    def _raise_for_status(self, response: httpx.Response, *, query: str, context: str) -> None:
        status = response.status_code
        self.logger.warning(
            "OpenWeather %s failed for %s (HTTP %d)",
            context,
            query,
            status,
            extra={"city": query, "endpoint": context, "http_status": status},
        )
        if status == 401:
            raise ProviderError(STATUS_UNAUTHORIZED, "Invalid API key")
        if status == 404:
            if context == "forecast":
                raise ProviderError(STATUS_LOCATION_NOT_FOUND, "Forecast not found")
            raise ProviderError(STATUS_LOCATION_NOT_FOUND, f"City '{query}' not found")

        error_body = self._decode_error_body(response)
        if error_body is not None:
            cod, message = error_body
            raise ProviderError(StatusCode.from_raw(cod), message)
        raise ProviderError(StatusCode.other(str(status)), f"HTTP {status}")

    @staticmethod
    def _decode_error_body(response: httpx.Response) -> tuple[str, str] | None:
        """Decode an OpenWeather ``{"cod": ..., "message": ...}`` error body."""
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        cod = body.get("cod")
        message = body.get("message")
        if isinstance(cod, bool) or not isinstance(cod, (str, int)):
            return None
        if not isinstance(message, str):
            return None
        return str(cod), message
