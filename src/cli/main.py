"""btrsnap CLI entry points.
This module exposes setup, snapshot lifecycle, and verification commands.
It maps argparse commands onto workflow calls.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from cli.setup_command import add_setup_commands, run_fix_timeshift_command, run_setup_command
from cli.snapshot_commands import (
    add_snapshot_commands,
    run_cleanup_command,
    run_create_command,
    run_list_command,
)
from cli.verify_command import add_verify_command, run_verify_command
from core.config import SnapConfig
from core.constants import SUPPORTED_SNAPSHOT_MANAGERS
from core.errors import SnapError
from core.logging_config import configure_logging, get_logger
from provision.host import always_confirm, build_host

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="btrsnap",
        description="Btrfs boot snapshots with GRUB integration",
    )
    parser.add_argument("--config", help="YAML config file; overrides BTRSNAP_CONFIG")
    parser.add_argument("--verbose", action="store_true", help="Emit debug log events")
    parser.add_argument("--snapshot-dir", help="Override the snapshot subvolume path")
    parser.add_argument("--source", help="Override the subvolume captured by snapshots")
    parser.add_argument("--prefix", help="Override the snapshot name prefix")
    parser.add_argument("--lock-path", help="Override the snapshot lock file")
    parser.add_argument(
        "--manager",
        choices=SUPPORTED_SNAPSHOT_MANAGERS,
        help="Snapshot manager that owns automated snapshots",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_setup_commands(subparsers)
    add_snapshot_commands(subparsers)
    add_verify_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the btrsnap CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return _dispatch(parser, args)
    except SnapError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        print(f"error={error}", file=sys.stderr)
        return 1


def _dispatch(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    config = _build_config(args)
    assume_yes = getattr(args, "yes", False)
    host = build_host(confirm=always_confirm if assume_yes else None)
    if args.command == "setup":
        return run_setup_command(config, host, args)
    if args.command == "fix-timeshift":
        return run_fix_timeshift_command(config, host, args)
    if args.command == "create":
        return run_create_command(config, host)
    if args.command == "cleanup":
        return run_cleanup_command(config, host, args)
    if args.command == "list":
        return run_list_command(config)
    if args.command == "verify":
        return run_verify_command(config, host, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> SnapConfig:
    """Build config with command-line overrides applied last.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated runtime config.
    """
    config = SnapConfig.load(args.config)
    return config.with_overrides(
        {
            "snapshot_dir": args.snapshot_dir,
            "source_subvolume": args.source,
            "snapshot_prefix": args.prefix,
            "lock_path": args.lock_path,
            "snapshot_manager": args.manager,
        }
    )
