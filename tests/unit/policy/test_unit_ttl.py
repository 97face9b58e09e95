# tests/unit/policy/test_unit_ttl.py - v1
"""Tests for policy/ttl.py - age-based probe recommendations."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from capprobe.policy.ttl import DEFAULT_NO_FINGERPRINT_TTL, DEFAULT_TTL, decide_ttl_policy

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestDecideTtlPolicy:
    def test_never_probed(self):
        d = decide_ttl_policy(None, True, now=NOW)
        assert d.should_probe
        assert d.policy == "prefer_cache"
        assert d.age is None

    def test_fresh_snapshot(self):
        d = decide_ttl_policy(NOW - timedelta(minutes=1), True, now=NOW)
        assert not d.should_probe
        assert d.policy == "prefer_cache"
        assert d.age == timedelta(minutes=1)

    def test_expired_with_fingerprint_refreshes(self):
        d = decide_ttl_policy(NOW - DEFAULT_TTL, True, now=NOW)
        assert d.should_probe
        assert d.policy == "refresh"

    def test_expired_without_fingerprint_bypasses(self):
        d = decide_ttl_policy(NOW - DEFAULT_NO_FINGERPRINT_TTL, False, now=NOW)
        assert d.should_probe
        assert d.policy == "bypass"

    def test_no_fingerprint_uses_longer_window(self):
        collected = NOW - timedelta(minutes=10)
        assert decide_ttl_policy(collected, True, now=NOW).should_probe
        assert not decide_ttl_policy(collected, False, now=NOW).should_probe

    def test_future_snapshot_counts_as_expired(self):
        d = decide_ttl_policy(NOW + timedelta(minutes=1), True, now=NOW)
        assert d.should_probe
        assert d.policy == "refresh"

    def test_naive_datetimes_treated_as_utc(self):
        collected = (NOW - timedelta(minutes=2)).replace(tzinfo=None)
        d = decide_ttl_policy(collected, True, now=NOW.replace(tzinfo=None))
        assert not d.should_probe

    def test_custom_windows(self):
        d = decide_ttl_policy(
            NOW - timedelta(seconds=30), True, now=NOW, ttl=timedelta(seconds=10),
        )
        assert d.should_probe
