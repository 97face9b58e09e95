# src/probe/coordinator.py - v1
"""Probe coordinator: the public entry point for capability probing.

Sequence per call:
  1. manual snapshot override -> returned immediately
  2. live fingerprint of the canonical binary path
  3. policy decision (reuse cached snapshot, or probe)
  4. fresh probe -> write-through to the cache store
  5. version/feature overrides merged onto the chosen snapshot

Concurrent calls for the same canonical path share one in-flight probe,
whatever policy each caller asked for. Different paths never wait on each
other.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import uuid
from datetime import datetime, timezone

from capprobe.builder.base_builder import BaseSnapshotBuilder
from capprobe.cache.base_cache_store import BaseCacheStore
from capprobe.cache.fingerprint import canonical_path, compute_fingerprint
from capprobe.core.errors import ProbeError
from capprobe.core.models import (
    BinaryFingerprint,
    CacheEntry,
    CapabilityGuard,
    CapabilitySnapshot,
    GuardState,
)
from capprobe.logging.context import clear_context, set_probe_context
from capprobe.overrides.models import CapabilityOverrides
from capprobe.overrides.resolver import merge_overrides
from capprobe.policy.engine import (
    CacheDecision,
    CachePolicy,
    plan_cache_action,
    reads_cache,
    validate_policy,
)
from capprobe.probe.guard import guard_feature

logger = logging.getLogger(__name__)


class ProbeCoordinator:
    """Fingerprint, cache, probe and merge capability snapshots.

    Args:
        cache_store: Store owned by the host; shared by every probe call.
        builder: Snapshot builder used for fresh probes.
        timeout_s: Upper bound for one builder invocation (None = no limit).
        default_policy: Policy used when a call does not specify one.
    """

    def __init__(
        self,
        cache_store: BaseCacheStore,
        builder: BaseSnapshotBuilder,
        timeout_s: float | None = 10.0,
        default_policy: str = "prefer_cache",
    ) -> None:
        self._store = cache_store
        self._builder = builder
        self._timeout_s = timeout_s
        self._default_policy = validate_policy(default_policy)
        self._inflight: dict[str, asyncio.Task[CapabilitySnapshot]] = {}

    @property
    def cache_store(self) -> BaseCacheStore:
        return self._store

    def is_probing(self, binary_path: str | os.PathLike[str]) -> bool:
        """True while a fresh probe for this binary is in flight."""
        return canonical_path(binary_path) in self._inflight

    async def probe(
        self,
        binary_path: str | os.PathLike[str],
        policy: str | None = None,
        overrides: CapabilityOverrides | None = None,
    ) -> CapabilitySnapshot:
        """Return the effective capability snapshot for ``binary_path``.

        Probe failures degrade to a snapshot with an unknown version and
        every known feature "unknown"; they are never raised.

        Raises:
            PolicyMisuseError: If ``policy`` is not a known cache policy.
        """
        if overrides is not None and overrides.manual_snapshot is not None:
            logger.debug("Using manual snapshot for %s", binary_path)
            return merge_overrides(overrides.manual_snapshot, overrides)

        checked = validate_policy(policy or self._default_policy)
        key = canonical_path(binary_path)

        set_probe_context(key, checked, uuid.uuid4().hex[:8])
        try:
            base = await self._resolve_base(key, checked)
        finally:
            clear_context()

        return merge_overrides(base, overrides)

    async def guard(
        self,
        binary_path: str | os.PathLike[str],
        feature: str,
        policy: str | None = None,
        overrides: CapabilityOverrides | None = None,
    ) -> CapabilityGuard:
        """Probe (or reuse) and return the guard for one feature."""
        snapshot = await self.probe(binary_path, policy=policy, overrides=overrides)
        return guard_feature(snapshot, feature)

    # --- Cache administration ---

    def list_entries(self) -> list[CacheEntry]:
        """All cached entries, as copies the caller may modify."""
        return [entry.model_copy(deep=True) for _, entry in self._store.entries()]

    def get_entry(self, binary_path: str | os.PathLike[str]) -> CacheEntry | None:
        """Copy of the cached entry for a binary, regardless of freshness."""
        entry = self._store.get(canonical_path(binary_path))
        return entry.model_copy(deep=True) if entry is not None else None

    def remove_entry(self, binary_path: str | os.PathLike[str]) -> bool:
        """Evict one binary. Returns True when an entry was removed."""
        removed = self._store.remove(canonical_path(binary_path))
        if removed:
            logger.info("Evicted cached capabilities for %s", binary_path)
        return removed

    def clear_all(self) -> None:
        """Evict every cached entry."""
        self._store.clear()
        logger.info("Cleared capability cache")

    # --- Internals ---

    async def _resolve_base(self, key: str, policy: CachePolicy) -> CapabilitySnapshot:
        pending = self._inflight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight probe for %s", key)
            shared = await asyncio.shield(pending)
            return shared.model_copy(deep=True)

        live = compute_fingerprint(key)
        entry = None
        if reads_cache(policy) and live is not None:
            entry = self._store.get(key)

        decision = plan_cache_action(policy, live, entry)
        logger.debug("Cache decision for %s: %s (%s)", key, decision.action, decision.reason)

        if decision.action == "reuse" and decision.entry is not None:
            return decision.entry.snapshot.model_copy(deep=True)

        task = asyncio.ensure_future(self._probe_fresh(key, live, decision))
        self._inflight[key] = task
        task.add_done_callback(functools.partial(self._forget, key))
        snapshot = await asyncio.shield(task)
        return snapshot.model_copy(deep=True)

    async def _probe_fresh(
        self,
        key: str,
        live: BinaryFingerprint | None,
        decision: CacheDecision,
    ) -> CapabilitySnapshot:
        try:
            if self._timeout_s is None:
                built = await self._builder.build(key)
            else:
                built = await asyncio.wait_for(self._builder.build(key), timeout=self._timeout_s)
        except ProbeError as e:
            logger.warning("Capability probe failed: %s", e)
            return self._unknown_snapshot(key, live)
        except asyncio.TimeoutError:
            e = ProbeError("timeout", key, f"no result within {self._timeout_s}s")
            logger.warning("Capability probe failed: %s", e)
            return self._unknown_snapshot(key, live)
        except Exception:
            logger.exception("Snapshot builder crashed for %s", key)
            return self._unknown_snapshot(key, live)

        snapshot = built.model_copy(update={"binary_path": key, "fingerprint": live})
        logger.info(
            "Probed %s: version=%s, %d feature(s)",
            key, snapshot.version or "unknown", len(snapshot.features),
        )

        if decision.write_cache:
            self._store.put(
                key, CacheEntry(key=key, snapshot=snapshot, cached_fingerprint=live)
            )
        return snapshot

    def _unknown_snapshot(
        self, key: str, live: BinaryFingerprint | None
    ) -> CapabilitySnapshot:
        features: dict[str, GuardState] = {
            name: "unknown" for name in self._builder.known_features
        }
        return CapabilitySnapshot(
            binary_path=key,
            version=None,
            features=features,
            collected_at=datetime.now(timezone.utc),
            fingerprint=live,
        )

    def _forget(self, key: str, task: asyncio.Task[CapabilitySnapshot]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
