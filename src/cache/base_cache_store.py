# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

Stores are keyed by canonical binary path. All operations are synchronous
and must be safe to call concurrently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from capprobe.core.errors import PolicyMisuseError
from capprobe.core.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for capability cache backends."""

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by canonical binary path."""

    @abstractmethod
    def put(self, key: str, entry: CacheEntry) -> bool:
        """Store a cache entry. Returns False when the write was skipped."""

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Remove a cache entry. Returns True when something was removed."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""

    @abstractmethod
    def entries(self) -> list[tuple[str, CacheEntry]]:
        """List all (key, entry) pairs."""

    @staticmethod
    def _check_key(key: str, entry: CacheEntry) -> None:
        if entry.key != key:
            raise PolicyMisuseError(
                f"Cache entry for {entry.key!r} stored under mismatched key {key!r}"
            )
