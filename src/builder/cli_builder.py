# src/builder/cli_builder.py - v1
"""Default snapshot builder that interrogates the tool through its CLI.

Probe plan, in order:
  1. <bin> --version                  version/build metadata
  2. <bin> features list --json       structured feature list
  3. <bin> features list              text fallback when JSON gave nothing
  4. <bin> --help                     flag scraping for still-unknown features

Every attempted step is recorded on the snapshot's probe_steps.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from capprobe.builder.base_builder import BaseSnapshotBuilder
from capprobe.builder.parsing import (
    normalize_feature_name,
    parse_feature_list_json,
    parse_feature_list_text,
    parse_help_output,
)
from capprobe.cache.fingerprint import compute_fingerprint
from capprobe.core.errors import ProbeError
from capprobe.core.models import CapabilitySnapshot, GuardState, ProbeStep, VersionInfo
from capprobe.core.versioning import parse_version_output

logger = logging.getLogger(__name__)

FEATURES_LIST = "features_list"
DEFAULT_KNOWN_FEATURES = ["features_list", "output_schema", "add_dir", "mcp_login"]


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of one probe command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        """stdout when present, otherwise stderr (some tools print there)."""
        return self.stdout if self.stdout.strip() else self.stderr


class CliSnapshotBuilder(BaseSnapshotBuilder):
    """Snapshot builder backed by asyncio subprocesses."""

    def __init__(
        self,
        known_features: list[str] | None = None,
        version_args: list[str] | None = None,
        features_args: list[str] | None = None,
        help_args: list[str] | None = None,
    ) -> None:
        self._known = [
            normalize_feature_name(f) for f in (known_features or DEFAULT_KNOWN_FEATURES)
        ]
        self._version_args = version_args or ["--version"]
        self._features_args = features_args or ["features", "list"]
        self._help_args = help_args or ["--help"]

    @property
    def known_features(self) -> list[str]:
        return list(self._known)

    async def build(self, binary_path: str) -> CapabilitySnapshot:
        """Run the probe plan against ``binary_path``."""
        steps: list[ProbeStep] = []
        saw_output = False

        steps.append("version_flag")
        out = await self._run(binary_path, self._version_args)
        version: VersionInfo | None = None
        if out.text.strip():
            version = parse_version_output(out.text)
            saw_output = True

        reported: dict[str, bool] | None = None
        list_ok = False

        steps.append("features_list_json")
        out = await self._run(binary_path, [*self._features_args, "--json"])
        saw_output = saw_output or bool(out.text.strip())
        if out.ok:
            reported = parse_feature_list_json(out.stdout)
            list_ok = reported is not None

        if reported is None:
            steps.append("features_list_text")
            out = await self._run(binary_path, self._features_args)
            saw_output = saw_output or bool(out.text.strip())
            if out.ok:
                reported = parse_feature_list_text(out.stdout)
                list_ok = reported is not None

        features = self._resolve_states(reported, list_ok)

        if any(features[name] == "unknown" for name in self._known):
            steps.append("help_fallback")
            out = await self._run(binary_path, self._help_args)
            saw_output = saw_output or bool(out.text.strip())
            mentioned = parse_help_output(out.text, self._known)
            for name in mentioned:
                if features.get(name) == "unknown":
                    features[name] = "supported"

        if not saw_output:
            raise ProbeError("unparsable", binary_path, "no probe command produced output")

        return CapabilitySnapshot(
            binary_path=binary_path,
            version=version,
            features=features,
            collected_at=datetime.now(timezone.utc),
            fingerprint=compute_fingerprint(binary_path),
            probe_steps=steps,
        )

    def _resolve_states(
        self,
        reported: dict[str, bool] | None,
        list_ok: bool,
    ) -> dict[str, GuardState]:
        """Map feature-list rows onto known features (extra rows are kept)."""
        features: dict[str, GuardState] = {}
        reported = reported or {}
        compact = {name.replace("_", ""): enabled for name, enabled in reported.items()}

        for name in self._known:
            if name == FEATURES_LIST and list_ok:
                features[name] = "supported"
                continue
            enabled = reported.get(name)
            if enabled is None:
                enabled = compact.get(name.replace("_", ""))
            if enabled is not None:
                features[name] = "supported" if enabled else "unsupported"
            elif list_ok:
                # The list is authoritative once it works
                features[name] = "unsupported"
            else:
                features[name] = "unknown"

        for name, enabled in reported.items():
            features.setdefault(name, "supported" if enabled else "unsupported")
        return features

    async def _run(self, binary_path: str, args: list[str]) -> CommandOutput:
        """Run one probe command, mapping exec failures to ProbeError."""
        try:
            proc = await asyncio.create_subprocess_exec(
                binary_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ProbeError("not_found", binary_path, str(e)) from e
        except PermissionError as e:
            raise ProbeError("permission", binary_path, str(e)) from e
        except OSError as e:
            raise ProbeError("io", binary_path, str(e)) from e

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise

        output = CommandOutput(
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if not output.ok:
            logger.warning(
                "%s %s exited with status %d", binary_path, " ".join(args), output.returncode,
            )
        return output
