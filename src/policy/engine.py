# src/policy/engine.py - v1
"""Cache policy state machine.

  prefer_cache  reuse when the live fingerprint matches the cached one,
                otherwise probe; write back only if a fingerprint exists
  refresh       always probe and overwrite the entry (fingerprint permitting)
  bypass        always probe; never read or write the cache
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

from capprobe.cache.fingerprint import fingerprints_match
from capprobe.core.errors import PolicyMisuseError
from capprobe.core.models import BinaryFingerprint, CacheEntry

CachePolicy = Literal["prefer_cache", "refresh", "bypass"]
CACHE_POLICIES: tuple[str, ...] = get_args(CachePolicy)


@dataclass(frozen=True)
class CacheDecision:
    """Outcome of applying a policy to the current cache state."""

    policy: CachePolicy
    action: Literal["reuse", "probe"]
    read_cache: bool
    write_cache: bool
    reason: str
    entry: CacheEntry | None = None

    def __post_init__(self) -> None:
        if self.action == "reuse" and (self.entry is None or not self.read_cache):
            raise PolicyMisuseError(
                f"Policy {self.policy!r} cannot reuse without a readable cache entry"
            )
        if self.policy == "bypass" and (self.read_cache or self.write_cache):
            raise PolicyMisuseError("Policy 'bypass' must not touch the cache")


def validate_policy(policy: str) -> CachePolicy:
    """Return ``policy`` unchanged if it is a known cache policy.

    Raises:
        PolicyMisuseError: For any other value.
    """
    if policy not in CACHE_POLICIES:
        raise PolicyMisuseError(
            f"Unknown cache policy {policy!r}; expected one of {', '.join(CACHE_POLICIES)}"
        )
    return policy  # type: ignore[return-value]


def reads_cache(policy: CachePolicy) -> bool:
    """Whether the coordinator may consult the store at all for this policy."""
    return policy == "prefer_cache"


def plan_cache_action(
    policy: str,
    live_fingerprint: BinaryFingerprint | None,
    entry: CacheEntry | None,
) -> CacheDecision:
    """Decide between reusing ``entry`` and running a fresh probe.

    Raises:
        PolicyMisuseError: On unknown policies, or when an entry is handed
            in under a policy that forbids cache reads.
    """
    checked = validate_policy(policy)
    has_fingerprint = live_fingerprint is not None

    if entry is not None and not reads_cache(checked):
        raise PolicyMisuseError(
            f"Policy {checked!r} forbids cache reads but an entry was supplied"
        )

    if checked == "bypass":
        return CacheDecision(
            policy=checked, action="probe", read_cache=False, write_cache=False,
            reason="bypass",
        )

    if checked == "refresh":
        return CacheDecision(
            policy=checked, action="probe", read_cache=False,
            write_cache=has_fingerprint,
            reason="refresh" if has_fingerprint else "refresh_no_fingerprint",
        )

    if not has_fingerprint:
        return CacheDecision(
            policy=checked, action="probe", read_cache=True, write_cache=False,
            reason="no_fingerprint",
        )

    if entry is None:
        return CacheDecision(
            policy=checked, action="probe", read_cache=True, write_cache=True,
            reason="miss",
        )

    if fingerprints_match(entry.cached_fingerprint, live_fingerprint):
        return CacheDecision(
            policy=checked, action="reuse", read_cache=True, write_cache=False,
            reason="hit", entry=entry,
        )

    return CacheDecision(
        policy=checked, action="probe", read_cache=True, write_cache=True,
        reason="stale",
    )
