"""Provisioning commands for the btrsnap CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.config import SnapConfig
from provision.host import Host
from provision.setup_workflow import render_next_steps, run_setup
from provision.timeshift import run_timeshift_fix


def add_setup_commands(subparsers: Any) -> None:
    """Register setup and fix-timeshift subcommands."""
    setup = subparsers.add_parser(
        "setup",
        help="Configure snapshot subvolume, helper scripts, units, and grub-btrfs",
    )
    setup.add_argument("--yes", action="store_true", help="Answer yes to every confirmation")
    fix = subparsers.add_parser(
        "fix-timeshift",
        help="Repair Timeshift Btrfs integration and test snapshot creation",
    )
    fix.add_argument("--yes", action="store_true", help="Answer yes to every confirmation")


def run_setup_command(config: SnapConfig, host: Host, args: argparse.Namespace) -> int:
    """Run the setup workflow and print next steps."""
    report = run_setup(config, host)
    if report is None:
        print("Setup aborted by user.")
        return 0
    print(f"manager={report.manager.value}")
    print(f"monitor_unit={report.monitor_unit or '-'}")
    print(f"grub_regenerated={str(report.grub_regenerated).lower()}")
    for warning in report.warnings:
        print(f"warning={warning}")
    for line in render_next_steps(config, report):
        print(line)
    return 0


def run_fix_timeshift_command(config: SnapConfig, host: Host, args: argparse.Namespace) -> int:
    """Run the Timeshift repair workflow."""
    report = run_timeshift_fix(config, host)
    print(f"block_device=/dev/{report.root_device.block_device}")
    print(f"root_subvolume={report.root_device.subvolume or '-'}")
    print(f"timeshift_config={report.config_path}")
    print(f"backup={report.backup_path or '-'}")
    print(f"test_snapshot={str(report.test_snapshot_created).lower()}")
    for warning in report.warnings:
        print(f"warning={warning}")
    return 0
