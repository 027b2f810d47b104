"""Timeshift integration repair workflow.

Fixes the usual "Selected snapshot device is not a system disk" setup by
forcing Btrfs mode in the Timeshift config, making sure the snapshot
subvolume exists, and checking that Timeshift can actually snapshot.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path

from core.config import SnapConfig
from core.constants import (
    GRUB_BTRFS_COMMAND,
    TIMESHIFT_AUR_PACKAGE,
    TIMESHIFT_COMMAND,
    TIMESHIFT_DATE_FORMAT,
    TIMESHIFT_EXCLUDE_PATTERNS,
    TIMESHIFT_PACKAGE,
    TIMESHIFT_SCHEDULE_COUNTS,
    TIMESHIFT_TEST_COMMENT,
    TIMESHIFT_TEST_TIMEOUT_SECONDS,
)
from core.errors import SnapProvisionError
from core.logging_config import get_logger
from core.types import RootDeviceInfo
from provision.grub_btrfs import discover_monitor_unit, regenerate_grub_config
from provision.host import Host
from provision.preflight import require_btrfs_root, require_root
from provision.subvolume import ensure_snapshot_subvolume
from system.devices import identify_root_device

_LOGGER = get_logger(__name__)
_CONFIG_MODE = 0o644


@dataclass
class TimeshiftFixReport:
    """Outcome of the Timeshift repair workflow.

    Attributes:
        root_device: Resolved root device details.
        config_path: Written Timeshift configuration.
        backup_path: Backup of the previous configuration, if any.
        test_snapshot_created: Whether the functional check succeeded.
        warnings: Non-fatal problems encountered.
    """

    root_device: RootDeviceInfo
    config_path: Path
    backup_path: Path | None = None
    test_snapshot_created: bool = False
    warnings: list[str] = field(default_factory=list)


def build_timeshift_config() -> dict[str, object]:
    """Return the fixed Timeshift configuration payload."""
    payload: dict[str, object] = {
        "backup_device_uuid": "",
        "parent_device_uuid": "",
        "do_first_run": "false",
        "btrfs_mode": "true",
        "include_btrfs_home_for_backup": "false",
        "include_btrfs_home_for_restore": "false",
        "stop_cron_emails": "true",
        "btrfs_use_qgroup": "true",
    }
    for tier, _count in TIMESHIFT_SCHEDULE_COUNTS:
        payload[f"schedule_{tier}"] = "true"
    for tier, count in TIMESHIFT_SCHEDULE_COUNTS:
        payload[f"count_{tier}"] = str(count)
    payload.update(
        {
            "snapshot_size": "0",
            "snapshot_count": "0",
            "date_format": TIMESHIFT_DATE_FORMAT,
            "exclude": list(TIMESHIFT_EXCLUDE_PATTERNS),
            "exclude-apps": [],
        }
    )
    return payload


def write_timeshift_config(config_path: Path) -> Path | None:
    """Write the Timeshift config, backing up any existing file.

    Returns:
        Backup path when a previous config existed.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    backup_path = None
    if config_path.exists():
        backup_path = config_path.with_name(f"{config_path.name}.backup-{int(time.time())}")
        backup_path.write_bytes(config_path.read_bytes())
        _LOGGER.info("timeshift_config_backed_up", backup_path=str(backup_path))
    config_path.write_text(json.dumps(build_timeshift_config(), indent=2) + "\n", encoding="utf-8")
    config_path.chmod(_CONFIG_MODE)
    _LOGGER.info("timeshift_config_written", path=str(config_path))
    return backup_path


def ensure_timeshift_installed(host: Host) -> None:
    """Install Timeshift from the repositories, falling back to the AUR.

    Raises:
        SnapProvisionError: If neither pacman nor the AUR helper succeeds.
    """
    if host.packages.command_available(TIMESHIFT_COMMAND):
        _LOGGER.info("timeshift_present")
        return
    if host.packages.install([TIMESHIFT_PACKAGE]):
        _LOGGER.info("timeshift_installed", source="pacman")
        return
    if host.packages.install_with_aur_helper(TIMESHIFT_AUR_PACKAGE):
        _LOGGER.info("timeshift_installed", source="aur")
        return
    raise SnapProvisionError(
        "Neither pacman nor yay could install Timeshift. "
        "Install Timeshift manually before continuing."
    )


def run_timeshift_fix(config: SnapConfig, host: Host) -> TimeshiftFixReport:
    """Repair Timeshift's Btrfs integration on this host.

    Args:
        config: Runtime configuration.
        host: Host adapters and prompt.

    Returns:
        Report describing the repair.

    Raises:
        SnapPreflightError: If not root or the root filesystem is not Btrfs.
        SnapProvisionError: If Timeshift or the root device cannot be resolved.
    """
    require_root()
    require_btrfs_root(host)
    ensure_timeshift_installed(host)

    root_device = identify_root_device(host.runner)
    if root_device is None:
        raise SnapProvisionError("Failed to identify the block device for the root filesystem.")
    _LOGGER.info(
        "root_device_identified",
        source=root_device.source,
        subvolume=root_device.subvolume,
        block_device=f"/dev/{root_device.block_device}",
    )

    ensure_snapshot_subvolume(host, config.snapshot_dir)
    backup_path = write_timeshift_config(config.timeshift_config_path)
    report = TimeshiftFixReport(
        root_device=root_device,
        config_path=config.timeshift_config_path,
        backup_path=backup_path,
    )
    _refresh_grub_btrfs(config, host, report)
    report.test_snapshot_created = _check_timeshift_snapshot(host)
    if not report.test_snapshot_created:
        report.warnings.append(
            "Timeshift could not create a test snapshot; finish setup in 'timeshift-launcher'."
        )
    return report


def _refresh_grub_btrfs(config: SnapConfig, host: Host, report: TimeshiftFixReport) -> None:
    if not host.packages.command_available(GRUB_BTRFS_COMMAND):
        report.warnings.append("grub-btrfs is not installed; run 'btrsnap setup' first.")
        return
    path_units = ("grub-btrfsd.path", "grub-btrfs.path")
    monitor_unit = discover_monitor_unit(host.systemd, path_units)
    if monitor_unit is None:
        report.warnings.append("No grub-btrfs monitoring path unit found.")
    elif not host.systemd.is_active(monitor_unit):
        if not host.systemd.enable(monitor_unit, now=True):
            report.warnings.append(f"Failed to enable {monitor_unit}.")
    if not regenerate_grub_config(host, config.grub_cfg_path):
        report.warnings.append("grub-mkconfig failed.")


def _check_timeshift_snapshot(host: Host) -> bool:
    result = host.runner.run(
        [TIMESHIFT_COMMAND, "--create", "--comments", TIMESHIFT_TEST_COMMENT],
        timeout=TIMESHIFT_TEST_TIMEOUT_SECONDS,
    )
    if not result.ok:
        _LOGGER.warning(
            "timeshift_test_snapshot_failed",
            timed_out=result.timed_out,
            returncode=result.returncode,
        )
        return False
    _LOGGER.info("timeshift_test_snapshot_created")
    if host.confirm("Would you like to delete the test snapshot?"):
        snapshot_name = _find_test_snapshot(host)
        if snapshot_name is None:
            _LOGGER.warning("timeshift_test_snapshot_not_listed")
        elif host.runner.run([TIMESHIFT_COMMAND, "--delete", "--snapshot", snapshot_name]).ok:
            _LOGGER.info("timeshift_test_snapshot_deleted", snapshot=snapshot_name)
        else:
            _LOGGER.warning("timeshift_test_snapshot_delete_failed", snapshot=snapshot_name)
    return True


def _find_test_snapshot(host: Host) -> str | None:
    listing = host.runner.run([TIMESHIFT_COMMAND, "--list"])
    for line in listing.stdout.splitlines():
        if TIMESHIFT_TEST_COMMENT in line:
            columns = line.split()
            if len(columns) >= 3:
                return columns[2]
    return None
