"""Typed domain models for cities, weather snapshots and daily summaries."""

from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

ICON_BASE_URL = "https://openweathermap.org/img/wn/"


class IconSize(str, Enum):
    """Icon sizes served by OpenWeather."""

    SMALL = ""
    STANDARD = "@2x"
    LARGE = "@4x"


def icon_url(icon_code: str, size: IconSize = IconSize.STANDARD) -> str:
    """Build the image URL for an OpenWeather icon code."""
    return f"{ICON_BASE_URL}{icon_code}{size.value}.png"


class City(BaseModel):
    """A user-tracked city.

    Two cities are equal when their names and country codes match
    case-insensitively; ``id`` is ignored for equality and hashing.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    country_code: str = ""

    @classmethod
    def from_user_input(cls, name: str, country_code: str = "") -> City:
        """Create a city from free-form input, trimming and normalizing it."""
        trimmed_name = name.strip()
        if not trimmed_name:
            raise ValueError("City name must not be empty.")
        return cls(name=trimmed_name, country_code=country_code.strip().upper())

    @property
    def query(self) -> str:
        """``name[,country]`` query value used by the current-weather endpoint."""
        if not self.country_code:
            return self.name
        return f"{self.name},{self.country_code}"

    def _key(self) -> tuple[str, str]:
        return (self.name.lower(), self.country_code.lower())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, City):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


class _WeatherModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Coordinates(_WeatherModel):
    longitude: float = Field(alias="lon")
    latitude: float = Field(alias="lat")


class WeatherCondition(_WeatherModel):
    """One entry of the provider's ``weather`` array."""

    condition_id: int = Field(default=0, alias="id")
    group_name: str = Field(default="", alias="main")
    description: str = ""
    icon_code: str = Field(default="", alias="icon")

    def icon_url(self, size: IconSize = IconSize.STANDARD) -> str:
        return icon_url(self.icon_code, size)


class AtmosphericData(_WeatherModel):
    temperature: float = Field(alias="temp")
    feels_like: float = Field(alias="feels_like")
    temp_min: float = Field(alias="temp_min")
    temp_max: float = Field(alias="temp_max")
    pressure_hpa: int = Field(alias="pressure")
    humidity_percent: int = Field(alias="humidity")
    sea_level_pressure: int | None = Field(default=None, alias="sea_level")
    ground_level_pressure: int | None = Field(default=None, alias="grnd_level")


class WindData(_WeatherModel):
    speed_mps: float = Field(default=0.0, alias="speed")
    direction_degrees: int = Field(default=0, alias="deg")
    gust_mps: float | None = Field(default=None, alias="gust")


class PrecipitationData(_WeatherModel):
    last_hour_mm: float | None = Field(default=None, alias="1h")


class CloudCoverage(_WeatherModel):
    coverage_percent: int = Field(default=0, alias="all")


class SystemInfo(_WeatherModel):
    type: int | None = None
    system_id: int | None = Field(default=None, alias="id")
    country_code: str = Field(default="", alias="country")
    sunrise: int = 0
    sunset: int = 0


class CurrentWeather(_WeatherModel):
    """Immutable current-conditions snapshot; temperatures are Kelvin."""

    coordinates: Coordinates | None = Field(default=None, alias="coord")
    weather_conditions: list[WeatherCondition] = Field(default_factory=list, alias="weather")
    base_station: str = Field(default="", alias="base")
    atmospheric: AtmosphericData = Field(alias="main")
    visibility_meters: int = Field(default=0, alias="visibility")
    wind: WindData = Field(default_factory=WindData)
    precipitation: PrecipitationData | None = Field(default=None, alias="rain")
    clouds: CloudCoverage = Field(default_factory=CloudCoverage)
    timestamp: int = Field(default=0, alias="dt")
    system: SystemInfo = Field(default_factory=SystemInfo, alias="sys")
    timezone_offset: int = Field(default=0, alias="timezone")
    location_id: int = Field(default=0, alias="id")
    location_name: str = Field(default="", alias="name")
    status_code: int = Field(default=200, alias="cod")

    @property
    def primary_condition(self) -> WeatherCondition | None:
        return self.weather_conditions[0] if self.weather_conditions else None

    @property
    def temperature(self) -> float:
        return self.atmospheric.temperature


class DailySummary(_WeatherModel):
    """One aggregated forecast day; temperatures are Kelvin."""

    date: str
    temp_min: float
    temp_max: float
    condition: str
    description: str
    icon: str

    def icon_url(self, size: IconSize = IconSize.STANDARD) -> str:
        return icon_url(self.icon, size)


class LocationData(BaseModel):
    """Persisted ambient location."""

    model_config = ConfigDict(frozen=True)

    city: str
    latitude: float
    longitude: float
