from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from weather_feed import feed_cli
from weather_feed.cities import DEFAULT_CITIES
from weather_feed.exceptions import NetworkError, StatusCode
from weather_feed.models import City

from helpers import FakeWeatherProvider, make_summary, make_weather


@pytest.fixture
def state_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "feed_state.json"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENWEATHER_API_KEY", "cli-test-key")
    monkeypatch.setenv("WEATHER_FEED_STATE_FILE", str(path))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        feed_cli,
        "setup_logger",
        lambda *args, **kwargs: logging.getLogger("test_feed_cli"),
    )
    return path


def _install_provider(monkeypatch: pytest.MonkeyPatch, provider: FakeWeatherProvider) -> None:
    def factory(settings: Any, logger: logging.Logger) -> FakeWeatherProvider:
        return provider

    monkeypatch.setattr(feed_cli, "OpenWeatherProvider", factory)


def _all_weather() -> dict:
    names = [name for name, _ in DEFAULT_CITIES] + ["Miami"]
    return {name.lower(): make_weather(name) for name in names}


def test_parse_city_argument() -> None:
    city = feed_cli.parse_city_argument(" Lisbon , pt")

    assert city == City(name="Lisbon", country_code="PT")
    assert feed_cli.parse_city_argument("Austin").country_code == ""


def test_refresh_prints_feed_and_persists_added_city(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    provider = FakeWeatherProvider(weather=_all_weather())
    _install_provider(monkeypatch, provider)

    exit_code = feed_cli.main(["--city", "Miami,us", "--unit", "celsius"])

    assert exit_code == 0
    assert provider.closed is True
    assert len(provider.weather_calls) == len(DEFAULT_CITIES) + 1
    document = json.loads(state_file.read_text(encoding="utf-8"))
    assert document["saved_cities"][0]["name"] == "Miami"
    assert document["saved_cities"][0]["country_code"] == "US"
    assert document["temperature_unit"] == "celsius"
    out = capsys.readouterr().out
    assert "Weather Feed" in out
    assert "Miami,US" in out
    assert "17°C" in out


def test_failed_city_gives_partial_feed_exit_code(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    weather = _all_weather()
    provider = FakeWeatherProvider(
        weather=weather,
        failures={"lisbon": NetworkError(StatusCode.other("ConnectError"), "refused")},
    )
    _install_provider(monkeypatch, provider)

    assert feed_cli.main([]) == 4
    out = capsys.readouterr().out
    assert "unavailable" in out
    assert "Problem loading weather" in out


def test_forecast_table_is_printed(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    provider = FakeWeatherProvider(
        weather=_all_weather(),
        forecasts={"lisbon": [make_summary("2026-02-24"), make_summary("2026-02-25")]},
    )
    _install_provider(monkeypatch, provider)

    assert feed_cli.main(["--forecast", "Lisbon,PT"]) == 0
    out = capsys.readouterr().out
    assert "Forecast" in out
    assert "Tue" in out
    assert provider.forecast_calls == ["Lisbon"]


def test_reset_restores_default_cities(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
) -> None:
    provider = FakeWeatherProvider(weather=_all_weather())
    _install_provider(monkeypatch, provider)
    assert feed_cli.main(["--city", "Miami,US"]) == 0

    assert feed_cli.main(["--reset"]) == 0

    document = json.loads(state_file.read_text(encoding="utf-8"))
    names = [entry["name"] for entry in document["saved_cities"]]
    assert names == [name for name, _ in DEFAULT_CITIES]


def test_missing_api_key_exits_with_config_error(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
) -> None:
    monkeypatch.delenv("OPENWEATHER_API_KEY")

    assert feed_cli.main([]) == 2


def test_blank_city_argument_is_rejected(
    monkeypatch: pytest.MonkeyPatch,
    state_file: Path,
) -> None:
    provider = FakeWeatherProvider(weather=_all_weather())
    _install_provider(monkeypatch, provider)

    assert feed_cli.main(["--city", " ,US"]) == 2
    assert provider.weather_calls == []


def test_unwritable_state_file_exits_with_persistence_error(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    state_file: Path,
) -> None:
    blocked = tmp_path / "state_dir"
    blocked.mkdir()
    monkeypatch.setenv("WEATHER_FEED_STATE_FILE", str(blocked))
    _install_provider(monkeypatch, FakeWeatherProvider(weather=_all_weather()))

    assert feed_cli.main([]) == 3
