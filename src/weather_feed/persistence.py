"""Persistence port for user selections, with JSON-file and in-memory stores."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .exceptions import PersistenceError
from .models import City, LocationData

SAVED_CITIES_KEY = "saved_cities"
CURRENT_LOCATION_KEY = "current_location"
TEMPERATURE_UNIT_KEY = "temperature_unit"
COMPLETED_ONBOARDING_KEY = "completed_onboarding"

_CITY_LIST = TypeAdapter(list[City])


class PersistenceStore(ABC):
    """Get/set contract for the few settings that survive restarts."""

    @abstractmethod
    def load_cities(self) -> list[City]: ...

    @abstractmethod
    def save_cities(self, cities: list[City]) -> None: ...

    @abstractmethod
    def load_current_location(self) -> LocationData | None: ...

    @abstractmethod
    def save_current_location(self, location: LocationData | None) -> None:
        """Persist the ambient location; ``None`` removes it."""

    @abstractmethod
    def load_temperature_unit(self) -> str | None: ...

    @abstractmethod
    def save_temperature_unit(self, unit: str) -> None: ...

    @abstractmethod
    def load_onboarding_completed(self) -> bool: ...

    @abstractmethod
    def save_onboarding_completed(self, completed: bool) -> None: ...


class MemoryPersistence(PersistenceStore):
    """Process-local store, used for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self.cities: list[City] = []
        self.current_location: LocationData | None = None
        self.temperature_unit: str | None = None
        self.onboarding_completed = False
        self.save_count = 0

    def load_cities(self) -> list[City]:
        return list(self.cities)

    def save_cities(self, cities: list[City]) -> None:
        self.cities = list(cities)
        self.save_count += 1

    def load_current_location(self) -> LocationData | None:
        return self.current_location

    def save_current_location(self, location: LocationData | None) -> None:
        self.current_location = location

    def load_temperature_unit(self) -> str | None:
        return self.temperature_unit

    def save_temperature_unit(self, unit: str) -> None:
        self.temperature_unit = unit

    def load_onboarding_completed(self) -> bool:
        return self.onboarding_completed

    def save_onboarding_completed(self, completed: bool) -> None:
        self.onboarding_completed = completed


class JsonFilePersistence(PersistenceStore):
    """Stores all settings in one JSON document, rewritten atomically on each save.

    Unreadable or malformed entries load as their defaults; failed writes raise
    PersistenceError.
    """

    def __init__(self, path: Path, logger: logging.Logger) -> None:
        self.path = path
        self.logger = logger

    def load_cities(self) -> list[City]:
        raw = self._read().get(SAVED_CITIES_KEY)
        if raw is None:
            return []
        try:
            return _CITY_LIST.validate_python(raw)
        except ValidationError as exc:
            self.logger.warning("Ignoring malformed saved cities in %s: %s", self.path, exc)
            return []

    def save_cities(self, cities: list[City]) -> None:
        self._write_key(SAVED_CITIES_KEY, _CITY_LIST.dump_python(cities, mode="json"))

    def load_current_location(self) -> LocationData | None:
        raw = self._read().get(CURRENT_LOCATION_KEY)
        if raw is None:
            return None
        try:
            return LocationData.model_validate(raw)
        except ValidationError as exc:
            self.logger.warning("Ignoring malformed current location in %s: %s", self.path, exc)
            return None

    def save_current_location(self, location: LocationData | None) -> None:
        self._write_key(
            CURRENT_LOCATION_KEY,
            location.model_dump(mode="json") if location is not None else None,
        )

    def load_temperature_unit(self) -> str | None:
        raw = self._read().get(TEMPERATURE_UNIT_KEY)
        return raw if isinstance(raw, str) else None

    def save_temperature_unit(self, unit: str) -> None:
        self._write_key(TEMPERATURE_UNIT_KEY, unit)

    def load_onboarding_completed(self) -> bool:
        return self._read().get(COMPLETED_ONBOARDING_KEY) is True

    def save_onboarding_completed(self, completed: bool) -> None:
        self._write_key(COMPLETED_ONBOARDING_KEY, completed)

    def _read(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            self.logger.warning("Failed reading state file %s: %s", self.path, exc)
            return {}
        try:
            document = json.loads(text)
        except ValueError:
            self.logger.warning("State file %s is not valid JSON; using defaults", self.path)
            return {}
        if not isinstance(document, dict):
            self.logger.warning("State file %s has unexpected top-level type", self.path)
            return {}
        return document

    def _write_key(self, key: str, value: Any) -> None:
        document = self._read()
        if value is None:
            document.pop(key, None)
        else:
            document[key] = value
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False, indent=2)
                fh.write("\n")
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Failed writing state file {self.path}: {exc}") from exc
