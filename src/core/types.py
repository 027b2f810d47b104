"""Shared typed models.

This module defines immutable data models used by snapshot, system,
and provisioning layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class SnapshotEntry:
    """One snapshot directory found under the snapshot root.

    Attributes:
        name: Directory name, ``<prefix>_<timestamp>``.
        path: Absolute snapshot path.
        modified_at: Filesystem modification time in epoch seconds.
    """

    name: str
    path: Path
    modified_at: float


@dataclass(frozen=True)
class CreationResult:
    """Outcome of one successful snapshot creation.

    Attributes:
        snapshot_path: Path of the new read-only snapshot.
        source_path: Subvolume that was snapshotted.
        created_at: Local timestamp embedded in the snapshot name.
    """

    snapshot_path: Path
    source_path: Path
    created_at: datetime


@dataclass(frozen=True)
class RetentionOutcome:
    """Outcome of one retention pass.

    Attributes:
        found_count: Matching snapshots found before cleanup.
        keep_latest: Configured number of newest snapshots to keep.
        intended: Snapshots selected for deletion, oldest first.
        deleted: Snapshots removed successfully.
        failed: Snapshots whose deletion failed.
    """

    found_count: int
    keep_latest: int
    intended: tuple[Path, ...] = ()
    deleted: tuple[Path, ...] = ()
    failed: tuple[Path, ...] = ()

    @property
    def deleted_count(self) -> int:
        """Number of successful deletions."""
        return len(self.deleted)

    @property
    def partial(self) -> bool:
        """Whether some intended deletions did not succeed."""
        return bool(self.failed)


class UnitState(str, Enum):
    """Install state of a systemd unit file."""

    MISSING = "missing"
    DISABLED = "disabled"
    ENABLED = "enabled"


class SnapshotManagerKind(str, Enum):
    """Snapshot manager that owns automated snapshots on the host."""

    TIMESHIFT = "timeshift"
    CUSTOM = "custom"


@dataclass(frozen=True)
class UnitActivationPlan:
    """Systemd unit changes derived from the selected snapshot manager.

    Attributes:
        enable_only: Units to enable without starting.
        enable_and_start: Units to enable and start now.
        disable: Units to disable and stop.
        stop: Units to stop without changing enablement.
    """

    enable_only: tuple[str, ...] = ()
    enable_and_start: tuple[str, ...] = ()
    disable: tuple[str, ...] = ()
    stop: tuple[str, ...] = ()


@dataclass(frozen=True)
class RootDeviceInfo:
    """Block device details for the mounted root filesystem.

    Attributes:
        source: Mount source reported by findmnt.
        mount_options: Raw mount option string.
        subvolume: Value of the ``subvol=`` option when present.
        block_device: Parent block device name without ``/dev/``.
    """

    source: str
    mount_options: str
    subvolume: str | None
    block_device: str


@dataclass
class SetupReport:
    """Accumulated outcome of the setup workflow.

    Attributes:
        manager: Snapshot manager selected for automation.
        monitor_unit: Discovered grub-btrfs monitoring unit, if any.
        grub_btrfs_installed: Whether grub-btrfs is available after setup.
        grub_regenerated: Whether grub-mkconfig succeeded.
        written_files: Files written by the workflow.
        warnings: Non-fatal problems encountered.
    """

    manager: SnapshotManagerKind
    monitor_unit: str | None = None
    grub_btrfs_installed: bool = False
    grub_regenerated: bool = False
    written_files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
