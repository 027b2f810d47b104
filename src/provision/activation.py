"""Snapshot manager selection and systemd unit activation."""

from __future__ import annotations

from core.config import SnapConfig
from core.constants import (
    CLEANUP_SERVICE_NAME,
    CLEANUP_TIMER_NAME,
    CREATION_SERVICE_NAME,
    TIMESHIFT_COMMAND,
)
from core.logging_config import get_logger
from core.types import SnapshotManagerKind, UnitActivationPlan
from system.packages import PackageManager
from system.systemd import SystemdManager

_LOGGER = get_logger(__name__)


def select_snapshot_manager(config: SnapConfig, packages: PackageManager) -> SnapshotManagerKind:
    """Resolve the configured manager; ``auto`` prefers an installed Timeshift."""
    if config.snapshot_manager == "timeshift":
        return SnapshotManagerKind.TIMESHIFT
    if config.snapshot_manager == "custom":
        return SnapshotManagerKind.CUSTOM
    if packages.command_available(TIMESHIFT_COMMAND):
        return SnapshotManagerKind.TIMESHIFT
    return SnapshotManagerKind.CUSTOM


def build_activation_plan(
    manager: SnapshotManagerKind,
    monitor_unit: str | None,
) -> UnitActivationPlan:
    """Decide which units to enable, start, disable, or stop.

    Timeshift owns automated snapshots when selected, so the built-in boot
    service and cleanup timer are turned off to avoid two managers pruning
    the same directory. The grub-btrfs monitor is always activated.

    Args:
        manager: Selected snapshot manager.
        monitor_unit: grub-btrfs monitoring unit, if one was found.

    Returns:
        Unit activation plan.
    """
    monitor = (monitor_unit,) if monitor_unit else ()
    if manager is SnapshotManagerKind.TIMESHIFT:
        return UnitActivationPlan(
            enable_and_start=monitor,
            disable=(CREATION_SERVICE_NAME, CLEANUP_TIMER_NAME),
            stop=(CLEANUP_SERVICE_NAME,),
        )
    return UnitActivationPlan(
        enable_only=(CREATION_SERVICE_NAME,),
        enable_and_start=(CLEANUP_TIMER_NAME, *monitor),
    )


def apply_activation_plan(systemd: SystemdManager, plan: UnitActivationPlan) -> list[str]:
    """Apply a plan unit by unit; failures are collected, not raised.

    Args:
        systemd: Unit control adapter.
        plan: Plan to apply.

    Returns:
        Human-readable warnings for skipped or failed units.
    """
    warnings: list[str] = []
    for unit_name in plan.disable:
        if systemd.unit_exists(unit_name):
            _LOGGER.info("unit_disabling", unit=unit_name)
            if not systemd.disable_now(unit_name):
                warnings.append(f"Failed to disable {unit_name}.")
    for unit_name in plan.stop:
        if systemd.unit_exists(unit_name) and systemd.is_active(unit_name):
            if not systemd.stop(unit_name):
                warnings.append(f"Failed to stop {unit_name}.")
    for unit_name in (*plan.enable_only, *plan.enable_and_start):
        warning = _enable_unit(systemd, unit_name)
        if warning:
            warnings.append(warning)
    for unit_name in plan.enable_and_start:
        warning = _start_unit(systemd, unit_name)
        if warning:
            warnings.append(warning)
    for warning in warnings:
        _LOGGER.warning("unit_activation_problem", detail=warning)
    return warnings


def _enable_unit(systemd: SystemdManager, unit_name: str) -> str | None:
    if not systemd.unit_exists(unit_name):
        return f"Unit {unit_name} not found during enable phase. Skipping."
    if systemd.is_enabled(unit_name):
        _LOGGER.info("unit_already_enabled", unit=unit_name)
        return None
    if not systemd.enable(unit_name):
        return f"Failed to enable {unit_name}."
    _LOGGER.info("unit_enabled", unit=unit_name)
    return None


def _start_unit(systemd: SystemdManager, unit_name: str) -> str | None:
    if not systemd.unit_exists(unit_name):
        return f"Unit {unit_name} not found during start phase. Skipping."
    if systemd.is_active(unit_name):
        _LOGGER.info("unit_already_active", unit=unit_name)
        return None
    if not systemd.start(unit_name):
        return f"Failed to start {unit_name}."
    _LOGGER.info("unit_started", unit=unit_name)
    return None
