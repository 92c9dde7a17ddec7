"""Ordered, de-duplicated list of user-tracked cities."""

from __future__ import annotations

import logging

from .models import City
from .persistence import PersistenceStore

DEFAULT_CITIES: tuple[tuple[str, str], ...] = (
    ("Los Angeles", "US"),
    ("San Francisco", "US"),
    ("Austin", "US"),
    ("Lisbon", "PT"),
    ("Auckland", "NZ"),
    ("Ann Arbor", "US"),
)


def default_cities() -> list[City]:
    """Fresh City values for the first-run list."""
    return [City(name=name, country_code=country) for name, country in DEFAULT_CITIES]


class CityListManager:
    """Own the saved city list and write every change straight through to persistence."""

    def __init__(self, persistence: PersistenceStore, logger: logging.Logger) -> None:
        self.persistence = persistence
        self.logger = logger
        self._cities: list[City] = []

    @property
    def cities(self) -> list[City]:
        return list(self._cities)

    def load(self) -> list[City]:
        """Read the persisted list, seeding the default cities when it is empty."""
        persisted = self.persistence.load_cities()
        if persisted:
            self._cities = persisted
        else:
            self.logger.info("No saved cities found; seeding %d defaults", len(DEFAULT_CITIES))
            self._set(default_cities())
        return self.cities

    def contains(self, city: City) -> bool:
        return city in self._cities

    def add(self, city: City) -> bool:
        """Prepend a city unless an equal one is already saved."""
        if self.contains(city):
            self.logger.debug("Skipping duplicate city %s", city.query)
            return False
        self._set([city, *self._cities])
        return True

    def remove(self, city: City) -> bool:
        """Remove the saved entry with the same id."""
        remaining = [saved for saved in self._cities if saved.id != city.id]
        if len(remaining) == len(self._cities):
            return False
        self._set(remaining)
        return True

    def reset(self) -> list[City]:
        """Replace the list with the defaults, discarding any customization."""
        self._set(default_cities())
        return self.cities

    def _set(self, cities: list[City]) -> None:
        self.persistence.save_cities(cities)
        self._cities = cities
