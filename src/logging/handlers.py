# src/logging/handlers.py — v2
"""Rotating file handlers for log files.

LOG_ROTATION accepts either a size ("10MB") or an interval ("12h", "1d",
"daily"). Dashboards that poll weather all day rotate by time; one-off CLI
runs usually rotate by size.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"^(\d+)\s*(KB|MB|GB)$", re.IGNORECASE)
_INTERVAL_RE = re.compile(r"^(\d+)\s*(h|d)$", re.IGNORECASE)
_SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}
_NAMED_INTERVALS = {"hourly": (1, "H"), "daily": (1, "D")}


def _parse_size(size_str: str) -> int:
    """Parse size string like '10MB' into bytes.

    Supported suffixes: KB, MB, GB (case-insensitive).
    """
    match = _SIZE_RE.match(size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    return int(match.group(1)) * _SIZE_UNITS[match.group(2).upper()]


def _parse_interval(interval_str: str) -> tuple[int, str] | None:
    """Parse '12h', '1d', 'hourly' or 'daily' into (interval, when)."""
    text = interval_str.strip().lower()
    if text in _NAMED_INTERVALS:
        return _NAMED_INTERVALS[text]
    match = _INTERVAL_RE.match(text)
    if not match:
        return None
    return int(match.group(1)), match.group(2).upper()


def create_rotating_handler(
    log_file: str,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Handler:
    """Create a size- or time-rotating file handler.

    Args:
        log_file: Path to log file.
        rotation: Max file size ("10MB") or rotation interval ("1d").
        retention: Number of backup files to keep.

    Raises:
        ValueError: If ``rotation`` is neither a size nor an interval.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    interval = _parse_interval(rotation)
    if interval is not None:
        every, when = interval
        return TimedRotatingFileHandler(
            filename=str(path),
            when=when,
            interval=every,
            backupCount=retention,
            encoding="utf-8",
        )

    return RotatingFileHandler(
        filename=str(path),
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
