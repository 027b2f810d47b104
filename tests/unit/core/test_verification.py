"""Unit tests for verification workflow helpers."""

from __future__ import annotations

import json
from dataclasses import replace

from core.config import SnapConfig
from core.verification import (
    VerificationOptions,
    render_verification_report,
    run_verification,
    save_verification_report,
)
from provision.grub_btrfs import ensure_snapshot_dir_setting
from provision.helper_scripts import write_helper_scripts
from provision.host import build_host
from provision.units import write_unit_files
from tests.fakes import btrfs_runner, fail, ok


def _configured_host_state(tmp_path) -> SnapConfig:
    config = replace(
        SnapConfig(),
        snapshot_dir=tmp_path / "snapshots",
        creation_script_path=tmp_path / "bin" / "create",
        cleanup_script_path=tmp_path / "bin" / "cleanup",
        unit_dir=tmp_path / "units",
        grub_btrfs_config_path=tmp_path / "grub-btrfs" / "config",
    )
    config.snapshot_dir.mkdir()
    write_helper_scripts(config, ["/usr/bin/btrsnap"])
    write_unit_files(config)
    ensure_snapshot_dir_setting(config.grub_btrfs_config_path, config.snapshot_dir)
    return config


def test_run_verification_passes_on_configured_host(tmp_path) -> None:
    """A fully configured host should pass every quick check."""
    config = _configured_host_state(tmp_path)
    host = build_host(btrfs_runner())

    report = run_verification(config, host, VerificationOptions(mode="quick", fail_fast=False))

    assert report.failed_count == 0 and report.passed_count == 6


def test_run_verification_flags_excess_snapshots(tmp_path) -> None:
    """More snapshots than keep_latest should fail the retention check."""
    config = replace(_configured_host_state(tmp_path), keep_latest=1)
    for index in range(2):
        (config.snapshot_dir / f"boot_auto_snap_2024-01-01_00000{index}").mkdir()

    report = run_verification(
        config, build_host(btrfs_runner()), VerificationOptions(mode="quick", fail_fast=False)
    )

    failed = [row.check_id for row in report.checks if row.status == "failed"]
    assert failed == ["V006"]


def test_fail_fast_stops_after_first_failure(tmp_path) -> None:
    """Fail-fast mode should stop at the first failed check."""
    config = replace(SnapConfig(), snapshot_dir=tmp_path / "missing")
    host = build_host(btrfs_runner("/"))

    report = run_verification(config, host, VerificationOptions(mode="full", fail_fast=True))

    assert len(report.checks) == 1 and report.failed_count == 1


def test_full_mode_checks_unit_enablement(tmp_path) -> None:
    """Full mode should add the unit enablement check."""
    config = _configured_host_state(tmp_path)
    runner = btrfs_runner().on(("systemctl", "is-enabled"), ok())

    report = run_verification(
        config, build_host(runner), VerificationOptions(mode="full", fail_fast=False)
    )

    assert report.checks[-1].check_id == "V007" and report.failed_count == 0


def test_render_report_lists_counts(tmp_path) -> None:
    """Rendered text should end with pass and fail counts."""
    config = _configured_host_state(tmp_path)
    report = run_verification(
        config, build_host(btrfs_runner()), VerificationOptions(mode="quick", fail_fast=False)
    )

    rendered = render_verification_report(report)

    assert rendered.splitlines()[-3:] == ["passed=6", "failed=0", "skipped=0"]


def test_timeshift_manager_skips_retention_check(tmp_path) -> None:
    """Retention is not checked when Timeshift owns snapshots."""
    config = replace(_configured_host_state(tmp_path), snapshot_manager="timeshift", keep_latest=1)
    for index in range(3):
        (config.snapshot_dir / f"boot_auto_snap_2024-01-01_00000{index}").mkdir()

    report = run_verification(
        config, build_host(btrfs_runner()), VerificationOptions(mode="quick", fail_fast=False)
    )

    statuses = {row.check_id: row.status for row in report.checks}
    assert report.manager == "timeshift" and statuses["V006"] == "skipped"
    assert report.failed_count == 0


def test_timeshift_manager_expects_builtin_units_disabled(tmp_path) -> None:
    """Full mode under Timeshift should fail while the boot service is enabled."""
    config = replace(_configured_host_state(tmp_path), snapshot_manager="timeshift")
    enabled = btrfs_runner().on(("systemctl", "is-enabled"), ok())
    disabled = btrfs_runner().on(("systemctl", "is-enabled"), fail())
    options = VerificationOptions(mode="full", fail_fast=False)

    enabled_report = run_verification(config, build_host(enabled), options)
    disabled_report = run_verification(config, build_host(disabled), options)

    assert enabled_report.checks[-1].status == "failed"
    assert disabled_report.checks[-1].status == "passed"


def test_save_report_writes_json(tmp_path) -> None:
    """Saved reports should carry the manager and every check row."""
    config = _configured_host_state(tmp_path)
    report = run_verification(
        config, build_host(btrfs_runner()), VerificationOptions(mode="quick", fail_fast=False)
    )

    saved = save_verification_report(report, tmp_path / "out" / "report.json")
    payload = json.loads(saved.read_text(encoding="utf-8"))

    assert payload["manager"] == "custom" and len(payload["checks"]) == 6
