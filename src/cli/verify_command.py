"""Verification command wiring for btrsnap CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, cast

from core.config import SnapConfig
from core.verification import (
    VerificationMode,
    VerificationOptions,
    render_verification_report,
    run_verification,
    save_verification_report,
)
from provision.host import Host


def add_verify_command(subparsers: Any) -> None:
    """Register verify subcommand."""
    parser = subparsers.add_parser(
        "verify",
        help="Check that snapshot automation is configured on this host",
    )
    parser.add_argument(
        "--mode",
        choices=("quick", "full"),
        default="quick",
        help="Verification mode; full also checks unit enablement",
    )
    parser.add_argument("--report", help="Optional path for a JSON report")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop after the first failed check",
    )


def run_verify_command(config: SnapConfig, host: Host, args: argparse.Namespace) -> int:
    """Execute verification workflow and print check report."""
    options = VerificationOptions(
        mode=cast(VerificationMode, args.mode),
        fail_fast=args.fail_fast,
    )
    report = run_verification(config, host, options)
    print(render_verification_report(report))
    if args.report:
        report_path = save_verification_report(report, Path(args.report))
        print(f"report_path={report_path}")
    return 0 if report.failed_count == 0 else 1
