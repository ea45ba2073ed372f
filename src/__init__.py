# src/__init__.py — v1
"""etweather: rate-limited, cached weather acquisition for irrigation dashboards."""

from etweather.version import __version__

__all__ = ["__version__"]
