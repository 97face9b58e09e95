# src/overrides/resolver.py - v1
"""Deterministic merge of overrides onto a base snapshot."""

from __future__ import annotations

import logging

from capprobe.core.models import CapabilitySnapshot, GuardState
from capprobe.overrides.models import CapabilityOverrides

logger = logging.getLogger(__name__)


def merge_overrides(
    base: CapabilitySnapshot,
    overrides: CapabilityOverrides | None,
) -> CapabilitySnapshot:
    """Return the effective snapshot for ``base`` under ``overrides``.

    Pure: ``base`` is never mutated and the result shares no mutable state
    with it. A manual snapshot short-circuits everything else.
    """
    if overrides is None:
        return base.model_copy(deep=True)

    if overrides.manual_snapshot is not None:
        return overrides.manual_snapshot.model_copy(deep=True)

    version = base.version
    applied = False
    if overrides.version_override is not None:
        version = overrides.version_override
        applied = True

    features: dict[str, GuardState] = dict(base.features)
    for name, state in overrides.feature_overrides.items():
        features[name] = state
        applied = True

    for name in overrides.feature_hints:
        if name in overrides.feature_overrides:
            continue
        if features.get(name) != "supported":
            features[name] = "supported"
        applied = True

    steps = list(base.probe_steps)
    if applied and "manual_override" not in steps:
        steps.append("manual_override")

    if applied:
        logger.debug(
            "Applied overrides to %s: version=%s features=%d hints=%d",
            base.binary_path,
            overrides.version_override is not None,
            len(overrides.feature_overrides),
            len(overrides.feature_hints),
        )

    return base.model_copy(
        update={"version": version, "features": features, "probe_steps": steps},
        deep=True,
    )
