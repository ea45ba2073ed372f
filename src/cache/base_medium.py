# src/cache/base_medium.py — v2
"""Abstract durable key/value medium for cache snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseDurableMedium(ABC):
    """String key/value store that survives process restarts."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier (json, sqlite, redis)."""

    def close(self) -> None:
        """Release connections held by the medium. No-op by default."""
