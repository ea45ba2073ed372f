# src/main.py — v2
"""CLI entry point — fetch, refresh, cache commands.

Usage:
    etweather fetch --lat <lat> --lon <lon> [--name NAME]
    etweather refresh <locations.json>
    etweather cache info
    etweather cache clear
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from etweather.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from etweather.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="etweather",
        description=f"etweather v{__version__} - cached, rate-limited forecast client",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- fetch ---
    p_fetch = subparsers.add_parser(
        "fetch", help="Fetch the forecast for one location",
    )
    p_fetch.add_argument("--lat", type=float, required=True, help="Latitude")
    p_fetch.add_argument("--lon", type=float, required=True, help="Longitude")
    p_fetch.add_argument("--name", default=None, help="Display name")
    p_fetch.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print the raw forecast JSON",
    )
    p_fetch.set_defaults(func=_cmd_fetch)

    # --- refresh ---
    p_refresh = subparsers.add_parser(
        "refresh", help="Refresh forecasts for a list of locations",
    )
    p_refresh.add_argument(
        "locations_file", type=Path,
        help='JSON file: [{"latitude": .., "longitude": .., "name": ..}, ...]',
    )
    p_refresh.set_defaults(func=_cmd_refresh)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or reset the cache")
    p_cache.add_argument("action", choices=["info", "clear"])
    p_cache.set_defaults(func=_cmd_cache)

    return parser


async def _cmd_fetch(args: argparse.Namespace, settings) -> int:
    """Fetch and print one location's forecast."""
    from etweather.core.models import Location
    from etweather.weather.client import WeatherClient
    from etweather.weather.errors import WeatherError

    try:
        location = Location(latitude=args.lat, longitude=args.lon, name=args.name)
    except ValueError as exc:
        logger.error("Invalid location: %s", exc)
        return 1

    async with WeatherClient(settings) as client:
        try:
            weather = await client.get_weather_data(location)
        except WeatherError as exc:
            print(exc.user_message, file=sys.stderr)
            return 3 if exc.transient else 1

    if args.as_json:
        print(weather.model_dump_json(indent=2))
    else:
        _print_forecast_summary(location.label, weather)
    return 0


async def _cmd_refresh(args: argparse.Namespace, settings) -> int:
    """Refresh every location listed in a JSON file."""
    from etweather.core.models import Location
    from etweather.weather.client import WeatherClient

    path: Path = args.locations_file
    if not path.is_file():
        logger.error("File not found: %s", path)
        return 1

    raw = json.loads(path.read_text(encoding="utf-8"))
    locations = [Location(**item) for item in raw]

    async with WeatherClient(settings) as client:
        results = await client.refresh_locations(locations)

    print(f"\nRefreshed {len(results)} locations:")
    for result in results:
        if result.ok:
            print(f"  OK    {result.location.label}")
        else:
            print(f"  {'WAIT' if result.rate_limited else 'FAIL':5s} "
                  f"{result.location.label}: {result.error}")
    return 0 if all(r.ok for r in results) else 3


async def _cmd_cache(args: argparse.Namespace, settings) -> int:
    """Show or clear the persisted cache."""
    from etweather.cache.medium_factory import create_medium

    medium = create_medium(settings)
    try:
        return await _cache_action(args.action, settings, medium)
    finally:
        medium.close()


async def _cache_action(action: str, settings, medium) -> int:
    from etweather.cache.memory_store import WeatherCache
    from etweather.cache.persistence import CachePersistence

    persistence = CachePersistence(
        medium,
        version=settings.cache_version,
        storage_key=settings.cache_storage_key,
    )

    if action == "clear":
        ok = await persistence.clear()
        print("Cache cleared" if ok else "Cache clear failed (see log)")
        return 0 if ok else 1

    snapshot = await persistence.load()
    cache = WeatherCache(settings.cache_ttl_s)
    if snapshot is not None:
        cache.restore(snapshot)
    print(f"\nCache ({persistence.medium.backend_name}, version {settings.cache_version}):")
    print(f"  Stored entries: {0 if snapshot is None else len(snapshot.entries)}")
    print(f"  Fresh entries:  {len(cache)}")
    print(f"  TTL:            {settings.cache_ttl_s:.0f}s")
    return 0


def _print_forecast_summary(label: str, weather) -> None:
    """Print a human-readable daily forecast table."""
    print(f"\nForecast for {label} ({weather.timezone}):")
    daily = weather.daily
    if daily is None:
        print("  No daily data")
        return
    units = weather.daily_units
    highs = daily.temperature_2m_max or []
    lows = daily.temperature_2m_min or []
    et0 = daily.et0_fao_evapotranspiration or []
    for i, day in enumerate(daily.time):
        hi = highs[i] if i < len(highs) else None
        lo = lows[i] if i < len(lows) else None
        et = et0[i] if i < len(et0) else None
        print(
            f"  {day}  high {_fmt(hi)}{units.get('temperature_2m_max', '')}"
            f"  low {_fmt(lo)}{units.get('temperature_2m_min', '')}"
            f"  ET0 {_fmt(et)}{units.get('et0_fao_evapotranspiration', '')}"
        )


def _fmt(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f}"


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from etweather.logging.context import set_component_context
    from etweather.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=None if settings.log_file is None else str(settings.log_file),
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    set_component_context("cli")


if __name__ == "__main__":
    sys.exit(main())
