# src/probe/guard.py - v1
"""Per-feature guards derived from an effective snapshot.

Guards are computed on demand and never cached. Hosts should treat
"unknown" as "skip the optional feature", never as a hard failure.
"""

from __future__ import annotations

import logging

from capprobe.core.models import CapabilityGuard, CapabilitySnapshot

logger = logging.getLogger(__name__)


def guard_feature(snapshot: CapabilitySnapshot, feature: str) -> CapabilityGuard:
    """Build the guard for ``feature``; unseen feature names are "unknown"."""
    state = snapshot.feature_state(feature)

    if state == "supported":
        note = f"Support for {feature} reported by probe of {snapshot.binary_path}."
        if "manual_override" in snapshot.probe_steps:
            note = f"Support for {feature} confirmed (overrides applied)."
        return CapabilityGuard(feature=feature, state=state, notes=[note])

    if state == "unsupported":
        return CapabilityGuard(
            feature=feature,
            state=state,
            notes=[f"{snapshot.binary_path} did not advertise {feature}; skipping it to stay compatible."],
        )

    notes = [f"Support for {feature} could not be confirmed; disable it for compatibility."]
    if feature not in snapshot.features:
        notes.append(f"{feature} is not among the probed features.")
    if not snapshot.version_known:
        notes.append("Version could not be determined; treating support conservatively.")
    return CapabilityGuard(feature=feature, state=state, notes=notes)


def guards_for(snapshot: CapabilitySnapshot, features: list[str]) -> dict[str, CapabilityGuard]:
    """Guards for several features, keyed by feature name."""
    return {name: guard_feature(snapshot, name) for name in features}


def log_guard_skip(guard: CapabilityGuard) -> None:
    """Log that a requested feature is being skipped."""
    logger.warning(
        "Skipping %s: support is %s (%s)",
        guard.feature, guard.state, "; ".join(guard.notes),
    )
