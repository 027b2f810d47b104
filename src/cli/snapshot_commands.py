"""Snapshot lifecycle commands for the btrsnap CLI."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Any

from core.config import SnapConfig
from provision.host import Host
from provision.preflight import require_root
from snapshots.creation import SnapshotCreator
from snapshots.listing import list_snapshots
from snapshots.naming import parse_snapshot_timestamp
from snapshots.retention import RetentionPolicy


def add_snapshot_commands(subparsers: Any) -> None:
    """Register create, cleanup, and list subcommands."""
    subparsers.add_parser("create", help="Create a read-only snapshot of the source subvolume")
    cleanup = subparsers.add_parser("cleanup", help="Delete all but the newest snapshots")
    cleanup.add_argument("--keep", type=_positive_int, help="Override the retention count")
    subparsers.add_parser("list", help="List managed snapshots, oldest first")


def run_create_command(config: SnapConfig, host: Host) -> int:
    """Create one snapshot and print its path."""
    require_root()
    result = SnapshotCreator(config, host.btrfs).create()
    print(f"snapshot_path={result.snapshot_path}")
    return 0


def run_cleanup_command(config: SnapConfig, host: Host, args: argparse.Namespace) -> int:
    """Apply retention and print a summary of deletions."""
    require_root()
    outcome = RetentionPolicy(config, host.btrfs).apply(keep_latest=args.keep)
    print(f"found={outcome.found_count}")
    print(f"keep_latest={outcome.keep_latest}")
    if not outcome.intended:
        print("No snapshots need to be deleted.")
        return 0
    for path in outcome.deleted:
        print(f"deleted={path}")
    for path in outcome.failed:
        print(f"failed={path}")
    print(f"Deleted {outcome.deleted_count} of {len(outcome.intended)} snapshot(s).")
    return 0


def run_list_command(config: SnapConfig) -> int:
    """Print managed snapshots as tab-separated rows.

    Columns are name, modification time, the creation time encoded in the
    name (``-`` for names that do not follow the scheme), and path.
    """
    for entry in list_snapshots(config.snapshot_dir, config.retention_prefix):
        modified = datetime.fromtimestamp(entry.modified_at).isoformat(timespec="seconds")
        taken_at = parse_snapshot_timestamp(entry.name, config.snapshot_prefix)
        taken = taken_at.isoformat(timespec="seconds") if taken_at else "-"
        print(f"{entry.name}\t{modified}\t{taken}\t{entry.path}")
    return 0


def _positive_int(raw_value: str) -> int:
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected integer, got '{raw_value}'") from error
    if value < 1:
        raise argparse.ArgumentTypeError("keep at least one snapshot")
    return value
