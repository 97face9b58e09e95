# src/overrides/loader.py - v1
"""Read and write overrides files (JSON)."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import ValidationError

from capprobe.core.errors import OverridesFileError
from capprobe.overrides.models import CapabilityOverrides


def read_overrides(path: str | os.PathLike[str]) -> CapabilityOverrides:
    """Load overrides from a JSON file.

    Raises:
        OverridesFileError: If the file is missing, unreadable or invalid.
    """
    file_path = Path(path).expanduser()
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise OverridesFileError(f"Cannot read overrides file {file_path}: {e}") from e
    try:
        return CapabilityOverrides.model_validate_json(text)
    except ValidationError as e:
        raise OverridesFileError(f"Invalid overrides file {file_path}: {e}") from e


def write_overrides(path: str | os.PathLike[str], overrides: CapabilityOverrides) -> Path:
    """Write overrides as pretty-printed JSON."""
    file_path = Path(path).expanduser()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(
        overrides.model_dump_json(indent=2, exclude_defaults=True), encoding="utf-8"
    )
    return file_path
