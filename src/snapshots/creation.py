"""Read-only boot snapshot creation.

This module verifies filesystem preconditions, picks a non-colliding
snapshot name, and invokes the atomic btrfs snapshot primitive.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from core.config import SnapConfig
from core.errors import SnapCreationError
from core.logging_config import get_logger
from core.types import CreationResult
from snapshots.locking import snapshot_lock
from snapshots.naming import build_snapshot_name, unique_snapshot_path
from system.btrfs import BtrfsTool

_LOGGER = get_logger(__name__)


class SnapshotCreator:
    """Creates one read-only snapshot of the configured source subvolume."""

    def __init__(
        self,
        config: SnapConfig,
        btrfs: BtrfsTool,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the creator.

        Args:
            config: Runtime configuration.
            btrfs: Btrfs command adapter.
            clock: Source of the local timestamp embedded in names.
        """
        self._config = config
        self._btrfs = btrfs
        self._clock = clock

    def create(self) -> CreationResult:
        """Create a snapshot under the configured snapshot directory.

        Returns:
            Result describing the new snapshot.

        Raises:
            SnapCreationError: If a precondition or the snapshot command fails.
            SnapBusyError: If cleanup or another creation is running.
        """
        with snapshot_lock(self._config.lock_path):
            return self._create_locked()

    def _create_locked(self) -> CreationResult:
        source = self._config.source_subvolume
        snapshot_dir = self._config.snapshot_dir
        self._verify_preconditions()
        timestamp = self._clock().replace(microsecond=0)
        snapshot_path = unique_snapshot_path(snapshot_dir, self._config.snapshot_prefix, timestamp)
        if snapshot_path.name != build_snapshot_name(self._config.snapshot_prefix, timestamp):
            _LOGGER.warning(
                "snapshot_name_collision",
                snapshot_dir=str(snapshot_dir),
                snapshot_name=snapshot_path.name,
            )
        _LOGGER.info("snapshot_create_started", source=str(source), destination=str(snapshot_path))
        result = self._btrfs.snapshot_readonly(source, snapshot_path)
        if not result.ok:
            raise SnapCreationError(
                f"Failed to create snapshot {snapshot_path} from {source}: "
                f"{result.stderr.strip() or f'exit status {result.returncode}'}."
            )
        if not self._btrfs.sync().ok:
            _LOGGER.warning("snapshot_sync_failed", snapshot_path=str(snapshot_path))
        _LOGGER.info("snapshot_created", snapshot_path=str(snapshot_path), source=str(source))
        return CreationResult(snapshot_path=snapshot_path, source_path=source, created_at=timestamp)

    def _verify_preconditions(self) -> None:
        """Check filesystem types and destination presence.

        Raises:
            SnapCreationError: If any precondition is not met.
        """
        source = self._config.source_subvolume
        snapshot_dir = self._config.snapshot_dir
        if not self._btrfs.is_btrfs(source):
            raise SnapCreationError(
                f"Source {source} is not on a Btrfs filesystem. Boot snapshots require Btrfs."
            )
        if not snapshot_dir.is_dir() and not self._btrfs.subvolume_exists(snapshot_dir):
            raise SnapCreationError(
                f"Snapshot directory {snapshot_dir} does not exist or is not accessible. "
                "Run 'btrsnap setup' to create it."
            )
        if not self._btrfs.is_btrfs(snapshot_dir):
            raise SnapCreationError(
                f"Snapshot directory {snapshot_dir} is not on a Btrfs filesystem."
            )
