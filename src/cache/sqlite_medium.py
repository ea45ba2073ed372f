# src/cache/sqlite_medium.py — v1
"""SQLite medium (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from etweather.cache.base_medium import BaseDurableMedium

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteMedium(BaseDurableMedium):
    """SQLite-backed key/value medium."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> str | None:
        cursor = self._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        )
        row = cursor.fetchone()
        return None if row is None else row[0]

    async def set(self, key: str, value: str) -> None:
        """Upsert ``value`` under ``key``."""
        self._conn.execute(
            """INSERT OR REPLACE INTO kv_store (key, value, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)""",
            (key, value),
        )
        self._conn.commit()

    async def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @property
    def backend_name(self) -> str:
        return "sqlite"
