"""End-to-end setup workflow.

Each step checks whether its target state already exists, so an
interrupted run can simply be repeated. Non-critical failures become
report warnings; precondition failures raise and stop the run.
"""

from __future__ import annotations

from pathlib import Path

from core.config import SnapConfig
from core.constants import (
    CLEANUP_SERVICE_NAME,
    GRUB_DIR,
    PREREQUISITE_PACKAGES,
)
from core.logging_config import get_logger
from core.types import SetupReport, SnapshotManagerKind
from provision.activation import (
    apply_activation_plan,
    build_activation_plan,
    select_snapshot_manager,
)
from provision.grub_btrfs import (
    discover_monitor_unit,
    ensure_grub_btrfs_installed,
    ensure_snapshot_dir_setting,
    regenerate_grub_config,
)
from provision.helper_scripts import write_helper_scripts
from provision.host import Host
from provision.preflight import run_setup_preflight
from provision.subvolume import ensure_snapshot_subvolume
from provision.units import write_unit_files

_LOGGER = get_logger(__name__)


def run_setup(
    config: SnapConfig,
    host: Host,
    cli_command: list[str] | None = None,
    grub_dir: Path = GRUB_DIR,
) -> SetupReport | None:
    """Configure snapshots, grub-btrfs, and units on this host.

    Args:
        config: Runtime configuration.
        host: Host adapters and prompt.
        cli_command: Optional argv prefix written into helper scripts.
        grub_dir: GRUB directory checked during preflight.

    Returns:
        Setup report, or None when the user declined to proceed.

    Raises:
        SnapPreflightError: If a host precondition fails.
        SnapProvisionError: If the snapshot subvolume cannot be prepared.
    """
    _LOGGER.info("setup_started")
    build_user = run_setup_preflight(host, grub_dir)
    if not host.confirm("Do you want to proceed with the setup? This will modify your system."):
        _LOGGER.info("setup_aborted_by_user")
        return None

    warnings: list[str] = []
    _LOGGER.info("prerequisites_installing", packages=list(PREREQUISITE_PACKAGES))
    if not host.packages.install(PREREQUISITE_PACKAGES):
        warnings.append("Prerequisite installation reported errors; Timeshift may be missing.")

    ensure_snapshot_subvolume(host, config.snapshot_dir)
    written = write_helper_scripts(config, cli_command)
    written.extend(write_unit_files(config))

    grub_btrfs_installed = ensure_grub_btrfs_installed(host, build_user)
    if not grub_btrfs_installed:
        warnings.append("grub-btrfs installation failed; snapshot boot entries may be missing.")
    ensure_snapshot_dir_setting(config.grub_btrfs_config_path, config.snapshot_dir)
    written.append(config.grub_btrfs_config_path)
    monitor_unit = discover_monitor_unit(host.systemd)
    if monitor_unit is None:
        warnings.append("No grub-btrfs monitoring unit found; GRUB will not refresh automatically.")

    if not host.systemd.daemon_reload():
        _LOGGER.error("daemon_reload_failed")
        warnings.append("systemctl daemon-reload failed.")
    manager = select_snapshot_manager(config, host.packages)
    _LOGGER.info("snapshot_manager_selected", manager=manager.value)
    plan = build_activation_plan(manager, monitor_unit)
    warnings.extend(apply_activation_plan(host.systemd, plan))

    grub_regenerated = regenerate_grub_config(host, config.grub_cfg_path)
    if not grub_regenerated:
        warnings.append("grub-mkconfig failed; regenerate the GRUB configuration manually.")

    report = SetupReport(
        manager=manager,
        monitor_unit=monitor_unit,
        grub_btrfs_installed=grub_btrfs_installed,
        grub_regenerated=grub_regenerated,
        written_files=written,
        warnings=warnings,
    )
    _LOGGER.info(
        "setup_finished",
        manager=manager.value,
        monitor_unit=monitor_unit,
        warning_count=len(warnings),
    )
    return report


def render_next_steps(config: SnapConfig, report: SetupReport) -> list[str]:
    """Render follow-up guidance for the selected snapshot manager."""
    if report.manager is SnapshotManagerKind.TIMESHIFT:
        lines = [
            "Timeshift is the primary snapshot manager.",
            "The built-in boot snapshot service and cleanup timer are disabled.",
            "1. Launch Timeshift ('sudo timeshift-launcher').",
            "2. Select 'BTRFS' as the snapshot type.",
            "3. Select the Btrfs system partition holding '/'.",
            f"4. Use '{config.snapshot_dir}' as the snapshot location if prompted.",
            "5. Configure snapshot levels and retention in Timeshift.",
        ]
    else:
        lines = [
            "The built-in boot snapshot service and cleanup timer are enabled.",
            "1. Reboot to let the boot snapshot service run.",
            "2. Check the GRUB menu for snapshot entries.",
            f"3. Verify snapshots appear in {config.snapshot_dir}.",
            "4. Monitor cleanup with 'systemctl list-timers --all' and "
            f"'journalctl -u {CLEANUP_SERVICE_NAME}'.",
        ]
    if report.monitor_unit:
        lines.append(f"Ensure '{report.monitor_unit}' is active for automatic GRUB updates.")
    else:
        lines.append("Enable grub-btrfs monitoring manually: 'systemctl enable --now grub-btrfsd.path'.")
    lines.append(f"Helper scripts: {config.creation_script_path}, {config.cleanup_script_path}")
    lines.append(f"grub-btrfs config: {config.grub_btrfs_config_path}")
    return lines
