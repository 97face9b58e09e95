# src/cache/json_store.py - v2
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores one snapshot record per binary under CACHE_ROOT so separate
processes can reuse each other's probes. Records are written atomically;
a record that fails to decode is treated as a miss and left in place.
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading
from pathlib import Path

from capprobe.cache.base_cache_store import BaseCacheStore
from capprobe.cache.snapshot_io import read_snapshot, write_snapshot
from capprobe.core.models import CacheEntry

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON records."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        entry = read_snapshot(self.record_path(key))
        if entry is not None and entry.key != key:
            logger.warning(
                "Cache record %s holds %s, expected %s",
                self.record_path(key), entry.key, key,
            )
            return None
        return entry

    def put(self, key: str, entry: CacheEntry) -> bool:
        """Persist a cache entry; entries without a fingerprint are skipped."""
        self._check_key(key, entry)
        if entry.cached_fingerprint is None:
            logger.info("Skipping cache write for %s: no fingerprint", key)
            return False
        with self._lock:
            try:
                write_snapshot(self.record_path(key), entry)
            except OSError as e:
                logger.warning("Failed to persist cache entry for %s: %s", key, e)
                return False
        return True

    def remove(self, key: str) -> bool:
        """Remove a cache entry."""
        path = self.record_path(key)
        with self._lock:
            if not path.exists():
                return False
            path.unlink(missing_ok=True)
        return True

    def clear(self) -> None:
        """Drop every record under the cache root."""
        with self._lock:
            for path in self._root.glob("*.json"):
                path.unlink(missing_ok=True)

    def entries(self) -> list[tuple[str, CacheEntry]]:
        """List all readable cache entries."""
        result: list[tuple[str, CacheEntry]] = []
        if not self._root.is_dir():
            return result

        for path in sorted(self._root.glob("*.json")):
            entry = read_snapshot(path)
            if entry is not None:
                result.append((entry.key, entry))
        return result

    def record_path(self, key: str) -> Path:
        """Return the record file for a cache key."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        name = _UNSAFE_CHARS.sub("_", Path(key).name) or "binary"
        return self._root / f"{name}-{digest}.json"
