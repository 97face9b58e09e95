# tests/conftest.py - v2
"""Shared test fixtures for all unit tests.

Provides fake binaries on disk, snapshot factories and a counting builder.
No real external tool is needed; subprocess tests use tiny shell scripts.
"""

from __future__ import annotations

import asyncio
import os
import stat
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from capprobe.builder.base_builder import BaseSnapshotBuilder
from capprobe.cache.memory_store import MemoryCacheStore
from capprobe.core.errors import ProbeError
from capprobe.core.models import CapabilitySnapshot, GuardState, VersionInfo


def write_script(directory: Path, name: str, body: str) -> Path:
    """Write an executable /bin/sh script and return its path."""
    path = directory / name
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def bump_file(path: Path, extra: str = "# changed\n") -> None:
    """Change size and mtime of a file so its fingerprint differs."""
    with path.open("a", encoding="utf-8") as f:
        f.write(extra)
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))


class CountingBuilder(BaseSnapshotBuilder):
    """Fake builder that counts invocations and stamps distinct times."""

    def __init__(
        self,
        features: dict[str, GuardState] | None = None,
        version: str | None = "tool 1.2.0",
        delay_s: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.calls = 0
        self.paths: list[str] = []
        self._features = features if features is not None else {"schema": "supported"}
        self._version = version
        self._delay_s = delay_s
        self._error = error
        self._epoch = datetime(2026, 1, 1, tzinfo=timezone.utc)

    @property
    def known_features(self) -> list[str]:
        return list(self._features) + ["extra"]

    async def build(self, binary_path: str) -> CapabilitySnapshot:
        self.calls += 1
        self.paths.append(binary_path)
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        if self._error is not None:
            raise self._error
        return CapabilitySnapshot(
            binary_path=binary_path,
            version=VersionInfo.parse(self._version) if self._version else None,
            features=dict(self._features),
            collected_at=self._epoch + timedelta(seconds=self.calls),
            probe_steps=["version_flag", "features_list_json"],
        )


# === FIXTURES ===


@pytest.fixture
def fake_binary(tmp_path: Path) -> Path:
    """A regular executable file that can be fingerprinted."""
    return write_script(tmp_path, "tool", "echo 'tool 1.2.0'\n")


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def counting_builder() -> CountingBuilder:
    return CountingBuilder()


@pytest.fixture
def sample_snapshot() -> CapabilitySnapshot:
    """Minimal probed snapshot."""
    return CapabilitySnapshot(
        binary_path="/bin/tool",
        version=VersionInfo.parse("tool 1.2.0"),
        features={"schema": "supported", "add_dir": "unsupported"},
        collected_at=datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc),
        probe_steps=["version_flag", "features_list_json"],
    )
