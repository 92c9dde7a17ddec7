"""Typed settings loader for the weather feed."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    openweather_api_key: str = Field(alias="OPENWEATHER_API_KEY", repr=False)
    openweather_weather_url: AnyHttpUrl = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        alias="OPENWEATHER_WEATHER_URL",
    )
    openweather_forecast_url: AnyHttpUrl = Field(
        default="https://api.openweathermap.org/data/2.5/forecast",
        alias="OPENWEATHER_FORECAST_URL",
    )
    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")

    state_file: Path = Field(
        default=Path("./data/weather_feed_state.json"),
        alias="WEATHER_FEED_STATE_FILE",
    )

    geocode_min_interval_seconds: float = Field(
        default=300.0,
        alias="GEOCODE_MIN_INTERVAL_SECONDS",
    )
    geocode_min_distance_meters: float = Field(
        default=1000.0,
        alias="GEOCODE_MIN_DISTANCE_METERS",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        """Accept lower-case level names from the environment."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_values(self) -> Settings:
        """Validate cross-field constraints."""
        if not self.openweather_api_key.strip():
            raise ValueError("OPENWEATHER_API_KEY must not be empty.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.geocode_min_interval_seconds < 0:
            raise ValueError("GEOCODE_MIN_INTERVAL_SECONDS must be >= 0.")
        if self.geocode_min_distance_meters < 0:
            raise ValueError("GEOCODE_MIN_DISTANCE_METERS must be >= 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "weather_url": str(self.openweather_weather_url),
            "forecast_url": str(self.openweather_forecast_url),
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "state_file": str(self.state_file),
            "geocode_min_interval_seconds": self.geocode_min_interval_seconds,
            "geocode_min_distance_meters": self.geocode_min_distance_meters,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    settings.state_file.parent.mkdir(parents=True, exist_ok=True)
    return settings
