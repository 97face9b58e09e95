# src/advisory/advisory.py - v1
"""Update advisory computed from a snapshot version and a releases table.

Pure comparison; no network access. When the table has no entry for the
local channel, the comparison falls back to stable, then beta, then nightly.
"""

from __future__ import annotations

import logging

from capprobe.advisory.models import LatestReleases, ReleaseInfo, UpdateAdvisory, UpdateStatus
from capprobe.core.models import ReleaseChannel, VersionInfo
from capprobe.core.versioning import comparable_version, parse_release_version

logger = logging.getLogger(__name__)

_FALLBACK_ORDER: tuple[ReleaseChannel, ...] = ("stable", "beta", "nightly")


def select_release(
    latest: LatestReleases, channel: ReleaseChannel
) -> tuple[ReleaseInfo | None, ReleaseChannel, bool]:
    """Pick the release to compare against.

    Returns:
        (release, channel used, whether a fallback channel was used).
    """
    direct = latest.for_channel(channel)
    if direct is not None:
        return ReleaseInfo(channel=channel, version=direct), channel, False

    for candidate in _FALLBACK_ORDER:
        version = latest.for_channel(candidate)
        if version is not None:
            return ReleaseInfo(channel=candidate, version=version), candidate, candidate != channel
    return None, channel, False


def compute_advisory(
    version: VersionInfo | None,
    latest_releases: LatestReleases,
) -> UpdateAdvisory:
    """Compare the local version against ``latest_releases``."""
    local_version = comparable_version(version) if version is not None else None
    local_release = None
    if version is not None and local_version is not None:
        local_release = ReleaseInfo(channel=version.channel, version=str(local_version))

    preferred: ReleaseChannel = local_release.channel if local_release else "stable"
    latest_release, comparison_channel, fell_back = select_release(latest_releases, preferred)

    notes: list[str] = []
    if fell_back:
        notes.append(
            f"No latest {preferred} release provided; comparing against {comparison_channel}."
        )

    status: UpdateStatus
    if latest_release is None:
        status = "unknown_latest_version"
        notes.append("No latest release information provided; update advisory unavailable.")
    elif local_version is None:
        status = "unknown_local_version"
        notes.append(
            f"Latest known {comparison_channel} release is {latest_release.version}; "
            "local version could not be parsed."
        )
    else:
        latest_version = parse_release_version(latest_release.version)
        if local_version < latest_version:
            status = "update_available"
            notes.append(
                f"Local version {local_version} is behind latest "
                f"{comparison_channel} {latest_release.version}."
            )
        elif local_version > latest_version:
            status = "local_newer_than_known"
            notes.append(
                f"Local version {local_version} is newer than provided "
                f"{comparison_channel} metadata ({latest_release.version})."
            )
        else:
            status = "up_to_date"
            notes.append(
                f"Local version matches latest {comparison_channel} release "
                f"{latest_release.version}."
            )

    logger.debug("Update advisory: %s", status)
    return UpdateAdvisory(
        local_release=local_release,
        latest_release=latest_release,
        comparison_channel=comparison_channel,
        status=status,
        notes=notes,
    )
