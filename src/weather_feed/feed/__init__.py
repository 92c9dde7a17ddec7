"""Multi-city weather feed state and orchestration."""

from .orchestrator import FeedOrchestrator
from .store import CityWeatherStore

__all__ = ["CityWeatherStore", "FeedOrchestrator"]
