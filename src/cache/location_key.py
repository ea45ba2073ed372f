# src/cache/location_key.py — v1
"""Location query keys for the weather cache.

Coordinates are rounded to a fixed precision before formatting so that
locations differing only by floating-point noise (repeated edits, unit
conversions) share one cache entry.
"""

from __future__ import annotations

from etweather.core.models import Location

# 4 decimal places is roughly 11 m at the equator, well below forecast grid size.
KEY_PRECISION = 4


def location_key(location: Location, precision: int = KEY_PRECISION) -> str:
    """Compute the cache key for a location.

    Args:
        location: Location with latitude/longitude.
        precision: Decimal places kept for each coordinate.

    Returns:
        Key formatted as ``"<lat>,<lon>"`` with ``precision`` decimals.
    """
    return coordinates_key(location.latitude, location.longitude, precision)


def coordinates_key(
    latitude: float, longitude: float, precision: int = KEY_PRECISION
) -> str:
    """Compute the cache key for a raw (latitude, longitude) pair."""
    lat = _normalize(latitude, precision)
    lon = _normalize(longitude, precision)
    return f"{lat:.{precision}f},{lon:.{precision}f}"


def _normalize(value: float, precision: int) -> float:
    # adding 0.0 turns -0.0 into 0.0 so both map to the same key
    return round(float(value), precision) + 0.0
