# src/overrides/models.py - v1
"""Caller-supplied capability overrides.

Precedence, highest first:
  1. manual_snapshot      returned as-is; no probe, no cache traffic
  2. cache or probe result
  3. version_override     replaces the version field only
  4. feature_overrides    hard-set a feature to supported/unsupported
  5. feature_hints        upgrade a feature to supported, never downgrade
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from capprobe.core.models import CapabilitySnapshot, GuardState, VersionInfo

ForcedState = Literal["supported", "unsupported"]


class CapabilityOverrides(BaseModel):
    """Layered overrides applied on top of cached or probed snapshots."""

    manual_snapshot: CapabilitySnapshot | None = None
    version_override: VersionInfo | None = None
    feature_overrides: dict[str, ForcedState] = Field(default_factory=dict)
    feature_hints: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.manual_snapshot is None
            and self.version_override is None
            and not self.feature_overrides
            and not self.feature_hints
        )

    @staticmethod
    def from_states(features: dict[str, GuardState]) -> dict[str, ForcedState]:
        """Mirror every decided state as a hard override ("unknown" is skipped)."""
        return {
            name: state for name, state in features.items() if state != "unknown"
        }

    @staticmethod
    def enabling(features: dict[str, GuardState]) -> list[str]:
        """Hints that only force-enable features already marked supported."""
        return [name for name, state in features.items() if state == "supported"]
