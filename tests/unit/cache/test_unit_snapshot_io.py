# tests/unit/cache/test_unit_snapshot_io.py - v1
"""Tests for cache/snapshot_io.py - persisted snapshot records."""

from __future__ import annotations

import pytest

from capprobe.cache.fingerprint import canonical_path, compute_fingerprint
from capprobe.cache.snapshot_io import (
    load_matching_entry,
    load_snapshot,
    read_snapshot,
    snapshot_matches_binary,
    write_snapshot,
)
from capprobe.core.errors import CacheCorruptionError
from capprobe.core.models import CacheEntry
from tests.conftest import bump_file


def _entry_for(binary, snapshot) -> CacheEntry:
    key = canonical_path(binary)
    fp = compute_fingerprint(binary)
    snap = snapshot.model_copy(update={"binary_path": key, "fingerprint": fp})
    return CacheEntry(key=key, snapshot=snap, cached_fingerprint=fp)


class TestWriteAndRead:
    def test_round_trip(self, tmp_path, fake_binary, sample_snapshot):
        entry = _entry_for(fake_binary, sample_snapshot)
        path = write_snapshot(tmp_path / "records" / "tool.json", entry)
        loaded = read_snapshot(path)
        assert loaded == entry
        assert loaded.snapshot.collected_at == sample_snapshot.collected_at
        assert loaded.snapshot.version.semantic == (1, 2, 0)

    def test_no_temp_files_left(self, tmp_path, fake_binary, sample_snapshot):
        write_snapshot(tmp_path / "tool.json", _entry_for(fake_binary, sample_snapshot))
        assert [p.name for p in tmp_path.iterdir() if p.name != "tool"] == ["tool.json"]

    def test_missing_record(self, tmp_path):
        assert read_snapshot(tmp_path / "missing.json") is None
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.json")

    def test_corrupt_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"key": "/bin/tool"}')
        assert read_snapshot(path) is None
        with pytest.raises(CacheCorruptionError, match="bad.json"):
            load_snapshot(path)

    def test_unknown_feature_state_is_corrupt(self, tmp_path, fake_binary, sample_snapshot):
        path = write_snapshot(tmp_path / "t.json", _entry_for(fake_binary, sample_snapshot))
        path.write_text(path.read_text().replace('"unsupported"', '"maybe"'))
        assert read_snapshot(path) is None


class TestMatching:
    def test_snapshot_matches_unchanged_binary(self, fake_binary, sample_snapshot):
        entry = _entry_for(fake_binary, sample_snapshot)
        assert snapshot_matches_binary(entry.snapshot, fake_binary)

    def test_snapshot_stale_after_change(self, fake_binary, sample_snapshot):
        entry = _entry_for(fake_binary, sample_snapshot)
        bump_file(fake_binary)
        assert not snapshot_matches_binary(entry.snapshot, fake_binary)

    def test_snapshot_for_other_binary(self, tmp_path, fake_binary, sample_snapshot):
        entry = _entry_for(fake_binary, sample_snapshot)
        other = tmp_path / "other"
        other.write_bytes(fake_binary.read_bytes())
        assert not snapshot_matches_binary(entry.snapshot, other)

    def test_load_matching_entry(self, tmp_path, fake_binary, sample_snapshot):
        path = write_snapshot(tmp_path / "r.json", _entry_for(fake_binary, sample_snapshot))
        assert load_matching_entry(path, fake_binary) is not None
        bump_file(fake_binary)
        assert load_matching_entry(path, fake_binary) is None
        assert path.exists()
