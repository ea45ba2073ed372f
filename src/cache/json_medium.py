# src/cache/json_medium.py — v1
"""JSON file medium (default CACHE_BACKEND=json).

Stores each key as its own file under CACHE_ROOT. Writes go to a temporary
sibling first and are renamed into place, so a crash mid-write leaves the
previous snapshot intact.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from etweather.cache.base_medium import BaseDurableMedium

logger = logging.getLogger(__name__)


class JsonFileMedium(BaseDurableMedium):
    """File-based medium using one JSON file per key."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> str | None:
        """Read the file for ``key``."""
        path = self._entry_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def set(self, key: str, value: str) -> None:
        """Atomically replace the file for ``key``."""
        path = self._entry_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    async def delete(self, key: str) -> None:
        """Remove the file for ``key``."""
        path = self._entry_path(key)
        if path.exists():
            path.unlink()

    @property
    def backend_name(self) -> str:
        return "json"

    def _entry_path(self, key: str) -> Path:
        """Return file path for a storage key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
