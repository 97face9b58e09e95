# src/core/versioning.py - v1
"""Version string parsing and comparison helpers.

Uses packaging.version for ordering. Tool builds that do not follow PEP 440
(e.g. ``1.4.0-nightly.20250101``) fall back to the bare major.minor.patch
triple with a channel marker appended.
"""

from __future__ import annotations

import re

from packaging.version import InvalidVersion, Version

from capprobe.core.models import ReleaseChannel, VersionInfo

_TRIM_CHARS = "(),;"
_SEMVER_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")
_HEX_RE = re.compile(r"^[0-9a-fA-F]{7,}$")


def _clean_token(token: str) -> str:
    token = token.strip(_TRIM_CHARS)
    if token[:1] in ("v", "V") and token[1:2].isdigit():
        token = token[1:]
    return token


def _parse_pep440(raw: str) -> Version | None:
    """First whitespace token that parses as a version with a dotted release."""
    for token in raw.split():
        candidate = _clean_token(token)
        if "." not in candidate:
            continue
        try:
            return Version(candidate)
        except InvalidVersion:
            continue
    return None


def _channel_for_version(version: Version) -> ReleaseChannel:
    if version.is_devrelease:
        return "nightly"
    if version.pre is None:
        return "stable"
    if version.pre[0] == "b":
        return "beta"
    return "custom"


def _infer_channel(raw: str) -> ReleaseChannel:
    lower = raw.lower()
    if "beta" in lower:
        return "beta"
    if "nightly" in lower:
        return "nightly"
    return "custom"


def _cleaned_hex(token: str) -> str | None:
    trimmed = token.strip(_TRIM_CHARS)
    for prefix in ("commit", ":", "g"):
        if trimmed.startswith(prefix):
            trimmed = trimmed[len(prefix):]
    if _HEX_RE.match(trimmed):
        return trimmed
    return None


def _extract_commit(raw: str) -> str | None:
    tokens = raw.split()
    for first, second in zip(tokens, tokens[1:]):
        if first.lower() == "commit":
            cleaned = _cleaned_hex(second)
            if cleaned:
                return cleaned
    for token in tokens:
        cleaned = _cleaned_hex(token)
        if cleaned:
            return cleaned
    return None


def parse_version_output(output: str) -> VersionInfo:
    """Parse the textual output of a version flag into VersionInfo."""
    raw = output.strip()
    parsed = _parse_pep440(raw)

    semantic: tuple[int, int, int] | None = None
    if parsed is not None:
        release = (tuple(parsed.release) + (0, 0, 0))[:3]
        semantic = (release[0], release[1], release[2])
        # PEP 440 does not know "nightly"; trust the raw text for it
        channel = _channel_for_version(parsed)
        if channel == "custom":
            channel = _infer_channel(raw)
    else:
        match = _SEMVER_RE.search(raw)
        if match:
            semantic = (int(match.group(1)), int(match.group(2)), int(match.group(3)))
        channel = _infer_channel(raw)

    return VersionInfo(
        raw=raw,
        semantic=semantic,
        commit=_extract_commit(raw),
        channel=channel,
    )


def comparable_version(info: VersionInfo) -> Version | None:
    """Version suitable for ordering, or None when nothing numeric was found."""
    parsed = _parse_pep440(info.raw)
    if parsed is not None:
        return parsed
    if info.semantic is None:
        return None
    base = ".".join(str(part) for part in info.semantic)
    if info.channel == "beta":
        base = f"{base}b0"
    elif info.channel == "nightly":
        base = f"{base}.dev0"
    return Version(base)


def parse_release_version(value: str) -> Version:
    """Parse a release-table version string (leading ``v`` allowed).

    Raises:
        InvalidVersion: If the string is not a valid version.
    """
    return Version(_clean_token(value.strip()))
