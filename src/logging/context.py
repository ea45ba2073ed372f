# src/logging/context.py — v2
"""Contextual logging support — attach request_id, location_key, component to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per scheduled upstream request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_location_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "location_key", default=None
)
_component: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "component", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    location_key: str | None = None
    component: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        location_key=_location_key.get(),
        component=_component.get(),
    )


def set_request_context(request_id: str, location_key: str) -> None:
    """Set request-level context (called once per upstream request)."""
    _request_id.set(request_id)
    _location_key.set(location_key)


def set_component_context(component: str) -> None:
    """Set the component tag (cli, dashboard, scheduler...)."""
    _component.set(component)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _location_key.set(None)
    _component.set(None)
