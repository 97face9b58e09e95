# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from capprobe.cache.base_cache_store import BaseCacheStore
from capprobe.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from capprobe.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from capprobe.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root)  # type: ignore[union-attr]

    raise ValueError(f"Unsupported cache backend: {backend!r}")
