# src/cache/fingerprint.py - v3
"""Binary fingerprinting for cache invalidation.

A fingerprint is file size plus modification time, read from filesystem
metadata. It is a cheap proxy for "the binary may have changed", not a
content hash. Missing or inconsistent metadata (some overlay/FUSE mounts)
yields None rather than an error.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from capprobe.core.models import BinaryFingerprint

logger = logging.getLogger(__name__)


def canonical_path(path: str | os.PathLike[str]) -> str:
    """Resolve symlinks and relative segments; fall back to the absolute path."""
    candidate = Path(path).expanduser()
    try:
        return str(candidate.resolve(strict=True))
    except (OSError, RuntimeError):
        return str(candidate.absolute())


def compute_fingerprint(path: str | os.PathLike[str]) -> BinaryFingerprint | None:
    """Compute the fingerprint of the file at ``path``.

    Returns:
        BinaryFingerprint, or None when metadata is unavailable.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        logger.debug("No fingerprint for %s: %s", path, e)
        return None

    if not stat.S_ISREG(st.st_mode):
        logger.debug("No fingerprint for %s: not a regular file", path)
        return None
    if st.st_mtime_ns <= 0 or st.st_size < 0:
        logger.debug("No fingerprint for %s: inconsistent metadata", path)
        return None

    return BinaryFingerprint(size=st.st_size, modified_ns=st.st_mtime_ns)


def fingerprints_match(
    cached: BinaryFingerprint | None,
    live: BinaryFingerprint | None,
) -> bool:
    """Structural equality; an absent fingerprint never matches anything."""
    if cached is None or live is None:
        return False
    return cached == live
