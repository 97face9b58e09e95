# src/api/facade.py - v2
"""Public API facade: wire a ProbeCoordinator from settings.

Usage:
    from capprobe.api.facade import create_coordinator, check_features
    coordinator = create_coordinator()
    guards = await check_features(coordinator, "/usr/local/bin/tool", ["output_schema"])
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import TYPE_CHECKING

from capprobe.builder.cli_builder import CliSnapshotBuilder
from capprobe.cache.cache_factory import create_cache_store
from capprobe.config.settings import Settings
from capprobe.overrides.loader import read_overrides
from capprobe.policy.ttl import TtlDecision, decide_ttl_policy
from capprobe.probe.coordinator import ProbeCoordinator
from capprobe.probe.guard import guards_for, log_guard_skip

if TYPE_CHECKING:
    from capprobe.builder.base_builder import BaseSnapshotBuilder
    from capprobe.cache.base_cache_store import BaseCacheStore
    from capprobe.core.models import CapabilityGuard, CapabilitySnapshot
    from capprobe.overrides.models import CapabilityOverrides

logger = logging.getLogger(__name__)


def create_coordinator(
    settings: Settings | None = None,
    cache_store: BaseCacheStore | None = None,
    builder: BaseSnapshotBuilder | None = None,
) -> ProbeCoordinator:
    """Build a coordinator from settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        cache_store: Explicit store; defaults to the configured backend.
        builder: Explicit builder; defaults to the CLI builder.
    """
    settings = settings or Settings()
    store = cache_store or create_cache_store(settings)
    builder = builder or CliSnapshotBuilder(
        known_features=settings.known_features_list,
        version_args=settings.version_argv,
        features_args=settings.features_argv,
        help_args=settings.help_argv,
    )
    logger.debug(
        "Coordinator: backend=%s policy=%s timeout=%.1fs",
        settings.cache_backend, settings.cache_policy, settings.probe_timeout_seconds,
    )
    return ProbeCoordinator(
        cache_store=store,
        builder=builder,
        timeout_s=settings.probe_timeout_seconds,
        default_policy=settings.cache_policy,
    )


def load_configured_overrides(settings: Settings) -> CapabilityOverrides | None:
    """Overrides from OVERRIDES_FILE, or None when unset.

    Raises:
        OverridesFileError: If the configured file is unusable.
    """
    if settings.overrides_file is None:
        return None
    return read_overrides(settings.overrides_file)


async def check_features(
    coordinator: ProbeCoordinator,
    binary_path: str | os.PathLike[str],
    features: list[str],
    policy: str | None = None,
    overrides: CapabilityOverrides | None = None,
) -> dict[str, CapabilityGuard]:
    """Probe once and return guards for every requested feature.

    Features that are not confirmed supported are logged as skipped.
    """
    snapshot = await coordinator.probe(binary_path, policy=policy, overrides=overrides)
    guards = guards_for(snapshot, features)
    for guard in guards.values():
        if not guard.is_supported:
            log_guard_skip(guard)
    return guards


def recommend_policy(
    snapshot: CapabilitySnapshot | None,
    settings: Settings | None = None,
) -> TtlDecision:
    """TTL-based policy recommendation for the next probe of a held snapshot."""
    settings = settings or Settings()
    return decide_ttl_policy(
        snapshot.collected_at if snapshot is not None else None,
        snapshot is not None and snapshot.fingerprint is not None,
        ttl=timedelta(seconds=settings.ttl_seconds),
        fallback_ttl=timedelta(seconds=settings.ttl_no_fingerprint_seconds),
    )
