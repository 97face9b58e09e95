# src/builder/base_builder.py - v1
"""Abstract snapshot builder interface.

A builder interrogates one binary and returns a complete snapshot. Absent
features are reported as "unsupported" or "unknown", never as errors; only
environmental failures raise ProbeError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from capprobe.core.models import CapabilitySnapshot


class BaseSnapshotBuilder(ABC):
    """Produces a CapabilitySnapshot for a binary path."""

    @property
    @abstractmethod
    def known_features(self) -> list[str]:
        """Feature names every snapshot from this builder covers."""

    @abstractmethod
    async def build(self, binary_path: str) -> CapabilitySnapshot:
        """Probe ``binary_path``.

        Raises:
            ProbeError: On exec failure, I/O failure or unparsable output.
        """
