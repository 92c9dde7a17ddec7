"""CLI: refresh the saved-city weather feed once and print it."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .cities import CityListManager
from .config import Settings, load_settings
from .exceptions import ConfigError, PersistenceError
from .feed.orchestrator import FeedOrchestrator
from .log_setup import setup_logger
from .models import City
from .persistence import JsonFilePersistence
from .units import TemperatureUnit, short_day_name
from .weather.openweather import OpenWeatherProvider


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse feed CLI arguments."""
    parser = argparse.ArgumentParser(description="Refresh and print the saved-city weather feed.")
    parser.add_argument(
        "--city",
        action="append",
        default=[],
        metavar="NAME[,CC]",
        help="Add a city to the saved list before refreshing (repeatable).",
    )
    parser.add_argument(
        "--forecast",
        metavar="NAME[,CC]",
        default=None,
        help="Also print the 5-day forecast for this city.",
    )
    parser.add_argument(
        "--unit",
        choices=[unit.value for unit in TemperatureUnit],
        default=None,
        help="Change and persist the display temperature unit.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Restore the default city list before refreshing.",
    )
    return parser.parse_args(argv)


def parse_city_argument(value: str) -> City:
    """Turn ``"Lisbon,pt"`` into City(name="Lisbon", country_code="PT")."""
    name, _, country = value.partition(",")
    return City.from_user_input(name, country)


def _print_feed(console: Console, orchestrator: FeedOrchestrator) -> None:
    table = Table(title="Weather Feed")
    table.add_column("City", overflow="fold")
    table.add_column("Temp")
    table.add_column("Feels Like")
    table.add_column("Conditions", overflow="fold")
    table.add_column("Humidity")
    table.add_column("Wind (m/s)")

    for city in orchestrator.all_cities:
        weather = orchestrator.weather(city)
        label = city.query
        if weather is None:
            table.add_row(label, "-", "-", "unavailable", "-", "-")
            continue
        condition = weather.primary_condition
        table.add_row(
            label,
            orchestrator.display_temperature(weather.temperature),
            orchestrator.display_temperature(weather.atmospheric.feels_like),
            condition.description if condition else "-",
            f"{weather.atmospheric.humidity_percent}%",
            f"{weather.wind.speed_mps:g}",
        )
    console.print(table)
    if orchestrator.last_error:
        console.print(f"[yellow]{orchestrator.last_error}[/yellow]")


def _print_forecast(console: Console, orchestrator: FeedOrchestrator, city: City) -> None:
    summaries = orchestrator.forecast(city)
    if not summaries:
        console.print(f"No forecast available for {city.query}.")
        return

    table = Table(title=f"5-Day Forecast: {city.query}")
    table.add_column("Day")
    table.add_column("Date")
    table.add_column("Low")
    table.add_column("High")
    table.add_column("Conditions", overflow="fold")
    for summary in summaries:
        table.add_row(
            short_day_name(summary.date),
            summary.date,
            orchestrator.display_temperature(summary.temp_min),
            orchestrator.display_temperature(summary.temp_max),
            f"{summary.condition} ({summary.description})" if summary.description else summary.condition,
        )
    console.print(table)


async def run_feed(
    settings: Settings,
    logger: logging.Logger,
    console: Console,
    *,
    add_cities: list[City],
    forecast_city: City | None = None,
    unit: TemperatureUnit | None = None,
    reset: bool = False,
) -> int:
    """Refresh the feed once and print it; returns an exit code."""
    persistence = JsonFilePersistence(settings.state_file, logger)
    city_list = CityListManager(persistence, logger)
    city_list.load()

    async with OpenWeatherProvider(settings=settings, logger=logger) as provider:
        orchestrator = FeedOrchestrator(
            provider=provider,
            city_list=city_list,
            persistence=persistence,
            logger=logger,
        )
        if reset:
            orchestrator.reset_cities()
        if unit is not None:
            orchestrator.temperature_unit = unit
        for city in add_cities:
            city_list.add(city)

        await orchestrator.refresh_feed()
        _print_feed(console, orchestrator)

        if forecast_city is not None:
            await orchestrator.load_forecast(forecast_city)
            _print_forecast(console, orchestrator, forecast_city)

    return 4 if orchestrator.last_error else 0


def main(argv: list[str] | None = None) -> int:
    """Run one feed refresh."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    try:
        add_cities = [parse_city_argument(raw) for raw in args.city]
        forecast_city = parse_city_argument(args.forecast) if args.forecast else None
    except ValueError as exc:
        logger.error("Invalid city argument: %s", exc)
        return 2

    try:
        return asyncio.run(
            run_feed(
                settings,
                logger,
                console,
                add_cities=add_cities,
                forecast_city=forecast_city,
                unit=TemperatureUnit(args.unit) if args.unit else None,
                reset=args.reset,
            )
        )
    except PersistenceError as exc:
        logger.error("Failed to persist feed state: %s", exc)
        return 3


if __name__ == "__main__":
    sys.exit(main())
