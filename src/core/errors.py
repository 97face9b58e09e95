# src/core/errors.py - v1
"""Exception taxonomy for capability probing.

Only PolicyMisuseError (and configuration errors) are meant to escape to
callers. ProbeError and CacheCorruptionError are recovered locally into
"unknown" snapshots or cache misses.
"""

from __future__ import annotations

from typing import Literal

ProbeErrorKind = Literal[
    "not_found", "permission", "non_zero_exit", "unparsable", "timeout", "io"
]


class CapProbeError(Exception):
    """Base class for all capprobe errors."""


class ProbeError(CapProbeError):
    """Environmental failure while interrogating a binary."""

    def __init__(self, kind: ProbeErrorKind, binary_path: str, detail: str = "") -> None:
        self.kind = kind
        self.binary_path = binary_path
        self.detail = detail
        message = f"Probe of {binary_path!r} failed ({kind})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CacheCorruptionError(CapProbeError):
    """A persisted snapshot record could not be decoded."""

    def __init__(self, record_path: str, detail: str) -> None:
        self.record_path = record_path
        self.detail = detail
        super().__init__(f"Corrupt snapshot record {record_path!r}: {detail}")


class PolicyMisuseError(CapProbeError):
    """Cache policy contract violated by the integrating code."""


class OverridesFileError(CapProbeError):
    """Overrides file could not be read or decoded."""
