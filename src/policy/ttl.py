# src/policy/ttl.py - v1
"""TTL/backoff helper for long-lived snapshots.

Useful where fingerprints cannot be trusted: hot-swapped binaries that keep
size and mtime, or filesystems that report no metadata at all. The helper
only recommends a policy; it never runs probes.

Recommended windows: 5 minutes when fingerprints work (expired snapshots are
refreshed in place), stretched toward 10-15 minutes when they do not
(expired snapshots are re-probed with the cache bypassed).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from capprobe.policy.engine import CachePolicy

DEFAULT_TTL = timedelta(minutes=5)
DEFAULT_NO_FINGERPRINT_TTL = timedelta(minutes=15)


@dataclass(frozen=True)
class TtlDecision:
    """Whether to re-probe, and with which cache policy."""

    should_probe: bool
    policy: CachePolicy
    age: timedelta | None = None


def decide_ttl_policy(
    collected_at: datetime | None,
    fingerprint_present: bool,
    *,
    now: datetime | None = None,
    ttl: timedelta = DEFAULT_TTL,
    fallback_ttl: timedelta = DEFAULT_NO_FINGERPRINT_TTL,
) -> TtlDecision:
    """Recommend a policy based on snapshot age and fingerprint availability.

    Args:
        collected_at: When the previous snapshot was produced (None = never).
        fingerprint_present: Whether fingerprinting works for this binary.
        now: Clock override for testing.
        ttl: Window used when fingerprints are available.
        fallback_ttl: Longer window used when they are not.

    Returns:
        TtlDecision; ``prefer_cache`` while the window is open, otherwise
        ``refresh`` (fingerprint present) or ``bypass`` (fingerprint missing).
    """
    if collected_at is None:
        return TtlDecision(should_probe=True, policy="prefer_cache")

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    if collected_at.tzinfo is None:
        collected_at = collected_at.replace(tzinfo=timezone.utc)
    age = current - collected_at

    window = ttl if fingerprint_present else max(ttl, fallback_ttl)
    # Clock skew (snapshot from the future) counts as expired
    expired = age < timedelta(0) or age >= window

    if not expired:
        return TtlDecision(should_probe=False, policy="prefer_cache", age=age)

    policy: CachePolicy = "refresh" if fingerprint_present else "bypass"
    return TtlDecision(should_probe=True, policy=policy, age=age)
