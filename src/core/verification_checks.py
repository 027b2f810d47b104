"""Read-only host checks used by `btrsnap verify`."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

from core.constants import CLEANUP_TIMER_NAME, CREATION_SERVICE_NAME, GRUB_BTRFS_SNAPSHOT_DIR_KEY
from core.errors import SnapVerificationError
from core.types import SnapshotManagerKind
from core.verification_types import CheckSkipped, VerificationMode, VerificationRuntime
from snapshots.listing import list_snapshots

CheckCallable = Callable[[VerificationRuntime], str]
CheckRow = tuple[str, str, CheckCallable]


def build_checks(mode: VerificationMode) -> tuple[CheckRow, ...]:
    """Build ordered check list for one verification mode."""
    checks: list[CheckRow] = [
        ("V001", "Btrfs Root Filesystem", check_btrfs_root),
        ("V002", "Snapshot Subvolume", check_snapshot_subvolume),
        ("V003", "Helper Scripts", check_helper_scripts),
        ("V004", "Unit Files", check_unit_files),
        ("V005", "grub-btrfs Snapshot Directory", check_grub_btrfs_config),
        ("V006", "Snapshot Retention", check_snapshot_retention),
    ]
    if mode == "full":
        checks.append(("V007", "Unit Enablement", check_unit_enablement))
    return tuple(checks)


def check_btrfs_root(runtime: VerificationRuntime) -> str:
    """Validate that the snapshot source is on Btrfs."""
    source = runtime.config.source_subvolume
    fs_type = runtime.host.btrfs.filesystem_type(source)
    if fs_type != "btrfs":
        raise SnapVerificationError(f"{source} is on '{fs_type or 'unknown'}', expected btrfs.")
    return f"source={source} fstype={fs_type}"


def check_snapshot_subvolume(runtime: VerificationRuntime) -> str:
    """Validate the snapshot subvolume exists."""
    snapshot_dir = runtime.config.snapshot_dir
    if not runtime.host.btrfs.subvolume_exists(snapshot_dir):
        raise SnapVerificationError(f"{snapshot_dir} is not a Btrfs subvolume.")
    return f"snapshot_dir={snapshot_dir}"


def check_helper_scripts(runtime: VerificationRuntime) -> str:
    """Validate both helper scripts exist and are executable."""
    paths = (runtime.config.creation_script_path, runtime.config.cleanup_script_path)
    _require_files(paths)
    not_executable = [str(path) for path in paths if not os.access(path, os.X_OK)]
    if not_executable:
        raise SnapVerificationError(f"Helper scripts not executable: {', '.join(not_executable)}.")
    return "scripts=" + ",".join(path.name for path in paths)


def check_unit_files(runtime: VerificationRuntime) -> str:
    """Validate generated unit files exist."""
    config = runtime.config
    paths = (config.creation_service_path, config.cleanup_service_path, config.cleanup_timer_path)
    _require_files(paths)
    return f"unit_dir={config.unit_dir}"


def check_grub_btrfs_config(runtime: VerificationRuntime) -> str:
    """Validate grub-btrfs points at the snapshot directory."""
    config_path = runtime.config.grub_btrfs_config_path
    _require_files((config_path,))
    expected = f'{GRUB_BTRFS_SNAPSHOT_DIR_KEY}="{runtime.config.snapshot_dir}"'
    lines = config_path.read_text(encoding="utf-8").splitlines()
    if expected not in lines:
        raise SnapVerificationError(f"{config_path} does not contain {expected}.")
    return expected


def check_snapshot_retention(runtime: VerificationRuntime) -> str:
    """Validate snapshot count does not exceed the retention limit."""
    if runtime.manager is SnapshotManagerKind.TIMESHIFT:
        raise CheckSkipped("Timeshift owns snapshot retention on this host.")
    config = runtime.config
    entries = list_snapshots(config.snapshot_dir, config.retention_prefix)
    if len(entries) > config.keep_latest:
        raise SnapVerificationError(
            f"{len(entries)} snapshots exceed keep_latest={config.keep_latest}; "
            "run 'btrsnap cleanup'."
        )
    newest = entries[-1].name if entries else "-"
    return f"snapshot_count={len(entries)} keep_latest={config.keep_latest} newest={newest}"


def check_unit_enablement(runtime: VerificationRuntime) -> str:
    """Validate built-in units match the active snapshot manager.

    The boot service and cleanup timer must be enabled for the custom
    manager and disabled when Timeshift owns snapshots.
    """
    systemd = runtime.host.systemd
    units = (CREATION_SERVICE_NAME, CLEANUP_TIMER_NAME)
    want_enabled = runtime.manager is SnapshotManagerKind.CUSTOM
    wrong = [unit for unit in units if systemd.is_enabled(unit) != want_enabled]
    if wrong:
        expected = "enabled" if want_enabled else "disabled"
        raise SnapVerificationError(
            f"Units not {expected} for {runtime.manager.value}: {', '.join(wrong)}."
        )
    state = "enabled" if want_enabled else "disabled"
    return f"{state}={','.join(units)}"


def _require_files(paths: tuple[Path, ...]) -> None:
    missing = [str(path) for path in paths if not path.is_file()]
    if missing:
        raise SnapVerificationError(f"Missing files: {', '.join(missing)}. Run 'btrsnap setup'.")
