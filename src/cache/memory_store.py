# src/cache/memory_store.py - v1
"""In-process cache store (default CACHE_BACKEND=memory).

Entries live for the lifetime of the store instance. Create one per host
and hand it to the ProbeCoordinator; there is no module-level singleton.
"""

from __future__ import annotations

import logging
import threading

from capprobe.cache.base_cache_store import BaseCacheStore
from capprobe.core.models import CacheEntry

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store guarded by a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> bool:
        """Store a cache entry; entries without a fingerprint are skipped."""
        self._check_key(key, entry)
        if entry.cached_fingerprint is None:
            logger.info("Skipping cache write for %s: no fingerprint", key)
            return False
        with self._lock:
            self._entries[key] = entry
        return True

    def remove(self, key: str) -> bool:
        """Remove a cache entry."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def entries(self) -> list[tuple[str, CacheEntry]]:
        """List all cached entries."""
        with self._lock:
            return list(self._entries.items())
