# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Snapshots, fingerprints and cache entries are frozen value objects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

GuardState = Literal["supported", "unsupported", "unknown"]
ReleaseChannel = Literal["stable", "beta", "nightly", "custom"]
ProbeStep = Literal[
    "version_flag",
    "features_list_json",
    "features_list_text",
    "help_fallback",
    "manual_override",
]

GUARD_STATES: tuple[GuardState, ...] = ("supported", "unsupported", "unknown")


# === BINARY IDENTITY ===


class BinaryFingerprint(BaseModel):
    """Cheap change detector for a binary on disk (size + mtime)."""

    model_config = ConfigDict(frozen=True)

    size: int
    modified_ns: int

    @property
    def modified_at(self) -> datetime:
        """Modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.modified_ns / 1_000_000_000, tz=timezone.utc)


# === VERSION ===


class VersionInfo(BaseModel):
    """Parsed output of the tool's version flag."""

    model_config = ConfigDict(frozen=True)

    raw: str
    semantic: tuple[int, int, int] | None = None
    commit: str | None = None
    channel: ReleaseChannel = "custom"

    @classmethod
    def parse(cls, output: str) -> VersionInfo:
        """Parse raw `--version` output."""
        from capprobe.core.versioning import parse_version_output

        return parse_version_output(output)

    def __str__(self) -> str:
        if self.semantic is None:
            return self.raw
        return ".".join(str(part) for part in self.semantic)


# === SNAPSHOTS ===


class CapabilitySnapshot(BaseModel):
    """What a specific binary was believed to support at a point in time.

    ``version`` is None when the version could not be determined.
    """

    model_config = ConfigDict(frozen=True)

    binary_path: str
    version: VersionInfo | None = None
    features: dict[str, GuardState] = Field(default_factory=dict)
    collected_at: datetime
    fingerprint: BinaryFingerprint | None = None
    probe_steps: list[ProbeStep] = Field(default_factory=list)

    @property
    def version_known(self) -> bool:
        return self.version is not None

    def feature_state(self, name: str) -> GuardState:
        """State of a feature; names the probe never saw are "unknown"."""
        return self.features.get(name, "unknown")


class CacheEntry(BaseModel):
    """Snapshot plus the fingerprint observed when it was cached."""

    model_config = ConfigDict(frozen=True)

    key: str
    snapshot: CapabilitySnapshot
    cached_fingerprint: BinaryFingerprint | None = None


# === GUARDS ===


class CapabilityGuard(BaseModel):
    """Per-feature decision surface derived from an effective snapshot."""

    feature: str
    state: GuardState
    notes: list[str] = Field(default_factory=list)

    @property
    def is_supported(self) -> bool:
        return self.state == "supported"

    @property
    def is_unknown(self) -> bool:
        return self.state == "unknown"
