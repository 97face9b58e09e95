# src/cache/snapshot_io.py - v1
"""On-disk snapshot records for cross-process cache reuse.

One JSON record per cache entry: binary_path, version, features,
collected_at and the optional fingerprint. Writes go to a temp file in the
target directory and are renamed into place, so readers never see a
partial record. Corrupt or unreadable records read back as "no cached data".
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from capprobe.cache.fingerprint import canonical_path, compute_fingerprint, fingerprints_match
from capprobe.core.errors import CacheCorruptionError
from capprobe.core.models import CacheEntry, CapabilitySnapshot

logger = logging.getLogger(__name__)


def write_snapshot(record_path: str | os.PathLike[str], entry: CacheEntry) -> Path:
    """Atomically write a cache entry record.

    Returns:
        Path of the written record.
    """
    target = Path(record_path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp_file:
        tmp_file.write(entry.model_dump_json(indent=2))
        tmp_path = Path(tmp_file.name)

    try:
        tmp_path.replace(target)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    return target


def load_snapshot(record_path: str | os.PathLike[str]) -> CacheEntry:
    """Load a record, failing loudly.

    Raises:
        FileNotFoundError: If the record does not exist.
        CacheCorruptionError: If the record cannot be decoded.
    """
    path = Path(record_path).expanduser()
    text = path.read_text(encoding="utf-8")
    try:
        return CacheEntry.model_validate_json(text)
    except ValidationError as e:
        raise CacheCorruptionError(str(path), f"{e.error_count()} validation error(s)") from e


def read_snapshot(record_path: str | os.PathLike[str]) -> CacheEntry | None:
    """Load a record, returning None for missing, unreadable or corrupt data."""
    try:
        return load_snapshot(record_path)
    except FileNotFoundError:
        return None
    except CacheCorruptionError as e:
        logger.warning("Ignoring cached snapshot: %s", e)
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read cached snapshot %s: %s", record_path, e)
        return None


def snapshot_matches_binary(
    snapshot: CapabilitySnapshot,
    binary_path: str | os.PathLike[str],
) -> bool:
    """True when the snapshot was taken from this binary in its current state.

    Hosts should check this before reusing a serialized snapshot so upgrades
    are never masked by stale capability data.
    """
    key = canonical_path(binary_path)
    if snapshot.binary_path != key:
        return False
    return fingerprints_match(snapshot.fingerprint, compute_fingerprint(key))


def load_matching_entry(
    record_path: str | os.PathLike[str],
    binary_path: str | os.PathLike[str],
) -> CacheEntry | None:
    """Read a record and accept it only if the binary is unchanged.

    A mismatching record is reported as absent but left on disk.
    """
    entry = read_snapshot(record_path)
    if entry is None:
        return None
    key = canonical_path(binary_path)
    if entry.key != key:
        logger.debug("Record %s belongs to %s, not %s", record_path, entry.key, key)
        return None
    if not fingerprints_match(entry.cached_fingerprint, compute_fingerprint(key)):
        logger.info("Cached snapshot for %s is stale (fingerprint changed)", key)
        return None
    return entry
