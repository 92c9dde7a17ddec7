"""Location signals, collaborator ports and reverse-geocode throttling."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

EARTH_RADIUS_METERS = 6_371_000.0


class PermissionState(str, Enum):
    UNDETERMINED = "undetermined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"

    @property
    def is_authorized(self) -> bool:
        return self is PermissionState.AUTHORIZED

    @property
    def is_blocked(self) -> bool:
        return self in {PermissionState.DENIED, PermissionState.RESTRICTED}


@dataclass(frozen=True, slots=True)
class Position:
    latitude: float
    longitude: float

    def distance_to(self, other: Position) -> float:
        """Great-circle distance in meters (haversine)."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        d_lat = lat2 - lat1
        d_lon = math.radians(other.longitude - self.longitude)
        a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


@dataclass(frozen=True, slots=True)
class PositionFix:
    """One raw position update from the device."""

    position: Position
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=UTC))


@dataclass(frozen=True, slots=True)
class Placemark:
    """Reverse-geocoding result; only the naming fields are used."""

    locality: str | None = None
    sub_administrative_area: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.locality or self.sub_administrative_area or self.name


class LocationSource(ABC):
    """Device location service that can start and stop emitting position fixes."""

    @abstractmethod
    def start_updates(self) -> None: ...

    @abstractmethod
    def stop_updates(self) -> None: ...

    def request_permission(self) -> None:
        """Ask the user for location access; permission changes arrive as events."""


class Geocoder(ABC):
    @abstractmethod
    async def reverse_geocode(self, position: Position) -> Placemark | None:
        """Resolve a position to a placemark, raising GeocodingError on failure."""


class GeocodeThrottle:
    """Decide whether a new fix is worth another reverse-geocode request.

    The first attempt always passes. After that a fix passes once the minimum
    interval has elapsed since the last geocode, or once it is at least the
    minimum distance away from the last geocoded position.

    Either limit alone is enough, not both together: a stationary device is
    re-geocoded once the interval has elapsed.
    """

    def __init__(self, min_interval_seconds: float = 300.0, min_distance_meters: float = 1000.0) -> None:
        self.min_interval_seconds = min_interval_seconds
        self.min_distance_meters = min_distance_meters
        self.last_time: datetime | None = None
        self.last_position: Position | None = None

    @classmethod
    def from_settings(cls, settings: Any) -> GeocodeThrottle:
        return cls(
            min_interval_seconds=settings.geocode_min_interval_seconds,
            min_distance_meters=settings.geocode_min_distance_meters,
        )

    def allows(self, fix: PositionFix) -> bool:
        if self.last_time is None or self.last_position is None:
            return True
        elapsed = (fix.timestamp - self.last_time).total_seconds()
        if elapsed >= self.min_interval_seconds:
            return True
        return fix.position.distance_to(self.last_position) >= self.min_distance_meters

    def record(self, fix: PositionFix) -> None:
        self.last_time = fix.timestamp
        self.last_position = fix.position

    def reset(self) -> None:
        self.last_time = None
        self.last_position = None
