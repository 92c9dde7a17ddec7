"""Application exception classes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StatusKind = Literal["ok", "location_not_found", "unauthorized", "other"]


@dataclass(frozen=True, slots=True)
class StatusCode:
    """Semantic status attached to provider failures."""

    kind: StatusKind
    raw: str | None = None

    @classmethod
    def from_raw(cls, raw: str) -> StatusCode:
        """Map an OpenWeather ``cod`` value to a semantic status."""
        if raw == "200":
            return cls("ok")
        if raw == "404":
            return cls("location_not_found")
        if raw == "401":
            return cls("unauthorized")
        return cls("other", raw)

    @classmethod
    def other(cls, raw: str) -> StatusCode:
        return cls("other", raw)

    @property
    def cod(self) -> str:
        """Raw code as OpenWeather would report it."""
        if self.kind == "ok":
            return "200"
        if self.kind == "location_not_found":
            return "404"
        if self.kind == "unauthorized":
            return "401"
        return self.raw or ""


STATUS_OK = StatusCode("ok")
STATUS_LOCATION_NOT_FOUND = StatusCode("location_not_found")
STATUS_UNAUTHORIZED = StatusCode("unauthorized")


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class WeatherFetchError(Exception):
    """Raised when a weather provider request fails, with a semantic status code."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def user_message(self) -> str | None:
        """User-facing description of the failure."""
        if self.code.kind == "location_not_found":
            return "City not found. Please try again."
        if self.code.kind == "unauthorized":
            return "Weather unavailable."
        if self.code.kind == "ok":
            return None
        return f"Weather error ({self.code.raw}). Please try again."

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class NetworkError(WeatherFetchError):
    """Transport failure or timeout while talking to the provider."""


class ProviderError(WeatherFetchError):
    """Provider answered with a non-2xx status."""


class ParseError(WeatherFetchError):
    """Provider response was malformed or had an unexpected shape."""


class PermissionDeniedError(Exception):
    """Raised when location access has been revoked."""


class GeocodingError(Exception):
    """Raised when reverse geocoding a position fails."""


class PersistenceError(Exception):
    """Raised when writing persisted user state fails."""
