# src/logging/logger.py - v2
"""Logger factory with JSON and text formatters.

Both formatters stamp records with the probe context (binary_path, policy,
probe_id) from logging.context. ProbeError failures carry their kind so
log pipelines can group them without parsing messages.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

from capprobe.core.errors import ProbeError
from capprobe.logging.context import get_context

ROOT_LOGGER = "capprobe"


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


def _probe_error_kind(record: logging.LogRecord) -> str | None:
    if record.exc_info and isinstance(record.exc_info[1], ProbeError):
        return record.exc_info[1].kind
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per line; context fields sit at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(get_context().as_dict())

        # Extra data passed via logger.x(..., extra={"data": ...})
        data = getattr(record, "data", None)
        if data:
            log_entry["data"] = data

        kind = _probe_error_kind(record)
        if kind is not None:
            log_entry["error_kind"] = kind
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Compact terminal format: ``HH:MM:SS LEVEL logger [probe] (policy) - msg``."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            _timestamp(record).strftime("%H:%M:%S"),
            f"{record.levelname:<7}",
            record.name.removeprefix(f"{ROOT_LOGGER}."),
        ]
        if ctx.probe_id:
            parts.append(f"[{ctx.probe_id}]")
        if ctx.policy:
            parts.append(f"({ctx.policy})")
        parts.append(f"- {record.getMessage()}")

        kind = _probe_error_kind(record)
        if kind is not None:
            parts.append(f"<{kind}>")
        text = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Configuration is applied by setup_logging()."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the capprobe logger tree and return its root.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ("json" or "text").
        log_file: Path to log file (None = console only).
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
        stream: Console stream; stderr by default so stdout stays parseable.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Re-init replaces handlers instead of stacking them
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from capprobe.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger
