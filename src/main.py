# src/main.py - v2
"""CLI entry point: probe, cache and advisory commands.

Usage:
    capprobe probe <binary> [--policy P] [--overrides FILE] [--feature NAME ...]
    capprobe cache list | show <binary> | remove <binary> | clear
    capprobe advisory <binary> [--stable V] [--beta V] [--nightly V]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from capprobe.version import __version__

logger = logging.getLogger(__name__)

_POLICIES = ("prefer_cache", "refresh", "bypass")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="capprobe",
        description=f"capprobe v{__version__}: capability probing for external CLI tools",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--cache-root", type=Path, default=None,
        help="Use the JSON cache backend rooted here",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- probe ---
    p_probe = subparsers.add_parser("probe", help="Probe a binary's capabilities")
    p_probe.add_argument("binary", type=Path, help="Path to the tool binary")
    p_probe.add_argument(
        "--policy", choices=_POLICIES, default=None,
        help="Cache policy (default: CACHE_POLICY setting)",
    )
    p_probe.add_argument(
        "--overrides", type=Path, default=None,
        help="JSON overrides file (default: OVERRIDES_FILE setting)",
    )
    p_probe.add_argument(
        "--feature", action="append", default=[], dest="features",
        help="Feature to guard (repeatable)",
    )
    p_probe.set_defaults(func=_cmd_probe)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or evict cached snapshots")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)
    cache_sub.add_parser("list", help="List cached binaries")
    p_show = cache_sub.add_parser("show", help="Show one cached snapshot")
    p_show.add_argument("binary", type=Path)
    p_remove = cache_sub.add_parser("remove", help="Evict one binary")
    p_remove.add_argument("binary", type=Path)
    cache_sub.add_parser("clear", help="Evict everything")
    p_cache.set_defaults(func=_cmd_cache)

    # --- advisory ---
    p_adv = subparsers.add_parser("advisory", help="Compare against latest releases")
    p_adv.add_argument("binary", type=Path, help="Path to the tool binary")
    p_adv.add_argument("--stable", default=None, help="Latest stable version")
    p_adv.add_argument("--beta", default=None, help="Latest beta version")
    p_adv.add_argument("--nightly", default=None, help="Latest nightly version")
    p_adv.set_defaults(func=_cmd_advisory)

    return parser


def _load_settings(args: argparse.Namespace):
    from capprobe.config.settings import load_settings

    if args.cache_root is not None:
        return load_settings(cache_backend="json", cache_root=args.cache_root)
    return load_settings()


async def _cmd_probe(args: argparse.Namespace, settings) -> int:
    """Probe one binary and print the effective snapshot."""
    from capprobe.api.facade import create_coordinator, load_configured_overrides
    from capprobe.overrides.loader import read_overrides
    from capprobe.probe.guard import guards_for

    coordinator = create_coordinator(settings)
    if args.overrides is not None:
        overrides = read_overrides(args.overrides)
    else:
        overrides = load_configured_overrides(settings)

    snapshot = await coordinator.probe(args.binary, policy=args.policy, overrides=overrides)
    payload = {"snapshot": snapshot.model_dump(mode="json")}
    if args.features:
        guards = guards_for(snapshot, args.features)
        payload["guards"] = {
            name: guard.model_dump(mode="json") for name, guard in guards.items()
        }
    print(json.dumps(payload, indent=2))
    return 0


async def _cmd_cache(args: argparse.Namespace, settings) -> int:
    """Cache administration."""
    from capprobe.api.facade import create_coordinator

    if settings.cache_backend == "memory":
        logger.warning("Memory cache backend is per-process; use --cache-root for a shared cache")
    coordinator = create_coordinator(settings)

    if args.cache_command == "list":
        entries = coordinator.list_entries()
        for entry in entries:
            version = entry.snapshot.version or "unknown"
            print(f"{entry.key}\t{version}\t{entry.snapshot.collected_at.isoformat()}")
        print(f"\n{len(entries)} cached binar{'y' if len(entries) == 1 else 'ies'}")
        return 0

    if args.cache_command == "show":
        entry = coordinator.get_entry(args.binary)
        if entry is None:
            logger.error("No cached snapshot for %s", args.binary)
            return 1
        print(entry.model_dump_json(indent=2))
        return 0

    if args.cache_command == "remove":
        if not coordinator.remove_entry(args.binary):
            logger.error("No cached snapshot for %s", args.binary)
            return 1
        return 0

    coordinator.clear_all()
    return 0


async def _cmd_advisory(args: argparse.Namespace, settings) -> int:
    """Print an update advisory for one binary."""
    from capprobe.advisory.advisory import compute_advisory
    from capprobe.advisory.models import LatestReleases
    from capprobe.api.facade import create_coordinator

    latest = LatestReleases(stable=args.stable, beta=args.beta, nightly=args.nightly)
    coordinator = create_coordinator(settings)
    snapshot = await coordinator.probe(args.binary)
    advisory = compute_advisory(snapshot.version, latest)

    print(f"\nUpdate advisory for {snapshot.binary_path}:")
    print(f"  Status:   {advisory.status}")
    if advisory.local_release:
        print(f"  Local:    {advisory.local_release.version} ({advisory.local_release.channel})")
    if advisory.latest_release:
        print(f"  Latest:   {advisory.latest_release.version} ({advisory.latest_release.channel})")
    for note in advisory.notes:
        print(f"  - {note}")
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from capprobe.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
