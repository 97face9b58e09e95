# src/logging/handlers.py - v3
"""Rotating file handler for capprobe logs.

Rotation is size based ("512KB", "10MB", "1GB", or a bare byte count).
The file is opened lazily, so configuring a log file for a CLI run that
never logs leaves no empty file behind.
"""

from __future__ import annotations

import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"^(\d+)\s*([KMG]?B)?$", re.IGNORECASE)
_UNIT_SHIFT = {"B": 0, "KB": 10, "MB": 20, "GB": 30}


def _parse_size(size: str | int) -> int:
    """Bytes for a rotation threshold; plain integers are taken as bytes."""
    if isinstance(size, int):
        value, unit = size, "B"
    else:
        match = _SIZE_RE.match(size.strip())
        if not match:
            raise ValueError(f"Invalid size format: {size!r}. Use e.g. '10MB'.")
        value, unit = int(match.group(1)), (match.group(2) or "B").upper()
    if value <= 0:
        raise ValueError(f"Invalid size format: {size!r}. Size must be positive.")
    return value << _UNIT_SHIFT[unit]


def create_rotating_handler(
    log_file: str | os.PathLike[str],
    rotation: str | int = "10MB",
    retention: int = 5,
) -> RotatingFileHandler:
    """Rotating handler writing UTF-8 to ``log_file``.

    Args:
        log_file: Log file path; parent directories are created.
        rotation: Size threshold before rolling over.
        retention: Rotated files kept next to the active one.
    """
    if retention < 0:
        raise ValueError(f"retention must be >= 0, got {retention}")
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    return RotatingFileHandler(
        path,
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
        delay=True,
    )
