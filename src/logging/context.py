# src/logging/context.py - v2
"""Contextual logging support: attach binary_path, policy, probe_id to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per probe call.
_binary_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "binary_path", default=None
)
_policy: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "policy", default=None
)
_probe_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "probe_id", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    binary_path: str | None = None
    policy: str | None = None
    probe_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        binary_path=_binary_path.get(),
        policy=_policy.get(),
        probe_id=_probe_id.get(),
    )


def set_probe_context(binary_path: str, policy: str, probe_id: str | None = None) -> None:
    """Set probe-level context (called once per probe call)."""
    _binary_path.set(binary_path)
    _policy.set(policy)
    _probe_id.set(probe_id)


def clear_context() -> None:
    """Reset all context variables."""
    _binary_path.set(None)
    _policy.set(None)
    _probe_id.set(None)
