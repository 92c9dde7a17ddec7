"""Ambient device location and its weather."""

from .coordinator import LocationWeatherCoordinator, PermissionChanged, PositionUpdated
from .geo import (
    GeocodeThrottle,
    Geocoder,
    LocationSource,
    PermissionState,
    Placemark,
    Position,
    PositionFix,
)

__all__ = [
    "GeocodeThrottle",
    "Geocoder",
    "LocationSource",
    "LocationWeatherCoordinator",
    "PermissionChanged",
    "PermissionState",
    "Placemark",
    "Position",
    "PositionFix",
    "PositionUpdated",
]
