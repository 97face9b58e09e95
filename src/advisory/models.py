# src/advisory/models.py - v1
"""Update advisory models: LatestReleases, ReleaseInfo, UpdateAdvisory."""

from __future__ import annotations

from typing import Literal

from packaging.version import InvalidVersion
from pydantic import BaseModel, Field, field_validator

from capprobe.core.models import ReleaseChannel
from capprobe.core.versioning import parse_release_version

UpdateStatus = Literal[
    "up_to_date",
    "update_available",
    "local_newer_than_known",
    "unknown_local_version",
    "unknown_latest_version",
]


class LatestReleases(BaseModel):
    """Caller-supplied table of the latest known release per channel.

    Nothing here is fetched; hosts fill it from their own distribution
    channel (package registry, release feed) before asking for advice.
    """

    stable: str | None = None
    beta: str | None = None
    nightly: str | None = None

    @field_validator("stable", "beta", "nightly")
    @classmethod
    def validate_version(cls, v: str | None) -> str | None:  # noqa: N805
        if v is None:
            return v
        try:
            parse_release_version(v)
        except InvalidVersion as e:
            raise ValueError(f"invalid release version {v!r}") from e
        return v

    def for_channel(self, channel: ReleaseChannel) -> str | None:
        if channel == "custom":
            return None
        return getattr(self, channel)


class ReleaseInfo(BaseModel):
    """A version on a specific channel."""

    channel: ReleaseChannel
    version: str


class UpdateAdvisory(BaseModel):
    """Comparison of the local binary against the latest releases table."""

    local_release: ReleaseInfo | None = None
    latest_release: ReleaseInfo | None = None
    comparison_channel: ReleaseChannel = "stable"
    status: UpdateStatus
    notes: list[str] = Field(default_factory=list)

    @property
    def is_update_recommended(self) -> bool:
        """True when the host should prompt for or attempt an update."""
        return self.status in ("update_available", "unknown_local_version")
