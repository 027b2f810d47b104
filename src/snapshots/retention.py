"""Count-based snapshot retention.

Keeps the newest N snapshots and deletes the rest with the btrfs
subvolume-delete primitive. Deletion is best effort: every candidate is
attempted, and a partial result is reported rather than retried.
"""

from __future__ import annotations

from typing import Sequence

from core.config import SnapConfig
from core.errors import SnapCommandError
from core.logging_config import get_logger
from core.types import RetentionOutcome, SnapshotEntry
from snapshots.listing import list_snapshots
from snapshots.locking import snapshot_lock
from system.btrfs import BtrfsTool

_LOGGER = get_logger(__name__)


def select_expired(entries: Sequence[SnapshotEntry], keep_latest: int) -> list[SnapshotEntry]:
    """Return the entries to delete so that keep_latest remain.

    Args:
        entries: Snapshots ordered oldest first.
        keep_latest: Number of newest entries to keep.

    Returns:
        The ``len(entries) - keep_latest`` oldest entries, or an empty list.
    """
    excess = len(entries) - max(keep_latest, 0)
    if excess <= 0:
        return []
    return list(entries[:excess])


class RetentionPolicy:
    """Applies the configured retention count to the snapshot directory."""

    def __init__(self, config: SnapConfig, btrfs: BtrfsTool) -> None:
        self._config = config
        self._btrfs = btrfs

    def apply(self, keep_latest: int | None = None) -> RetentionOutcome:
        """Delete all but the newest snapshots.

        Args:
            keep_latest: Optional override of the configured retention count.

        Returns:
            Outcome with intended, deleted, and failed snapshot paths.

        Raises:
            SnapRetentionError: If the snapshot directory cannot be listed.
            SnapBusyError: If creation or another cleanup is running.
        """
        keep = self._config.keep_latest if keep_latest is None else keep_latest
        with snapshot_lock(self._config.lock_path):
            return self._apply_locked(keep)

    def _apply_locked(self, keep_latest: int) -> RetentionOutcome:
        snapshot_dir = self._config.snapshot_dir
        prefix = self._config.retention_prefix
        entries = list_snapshots(snapshot_dir, prefix)
        _LOGGER.info(
            "retention_scan",
            snapshot_dir=str(snapshot_dir),
            prefix=prefix,
            found_count=len(entries),
            keep_latest=keep_latest,
        )
        expired = select_expired(entries, keep_latest)
        if not expired:
            _LOGGER.info("retention_nothing_to_delete", found_count=len(entries))
            return RetentionOutcome(found_count=len(entries), keep_latest=keep_latest)
        deleted = []
        failed = []
        for entry in expired:
            if self._delete(entry):
                deleted.append(entry.path)
            else:
                failed.append(entry.path)
        outcome = RetentionOutcome(
            found_count=len(entries),
            keep_latest=keep_latest,
            intended=tuple(entry.path for entry in expired),
            deleted=tuple(deleted),
            failed=tuple(failed),
        )
        log = _LOGGER.warning if outcome.partial else _LOGGER.info
        log(
            "retention_finished",
            intended_count=len(outcome.intended),
            deleted_count=outcome.deleted_count,
            failed_count=len(outcome.failed),
        )
        return outcome

    def _delete(self, entry: SnapshotEntry) -> bool:
        try:
            result = self._btrfs.delete_subvolume(entry.path)
        except SnapCommandError as error:
            _LOGGER.error("snapshot_delete_failed", snapshot_path=str(entry.path), error=str(error))
            return False
        if not result.ok:
            _LOGGER.error(
                "snapshot_delete_failed",
                snapshot_path=str(entry.path),
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
            return False
        _LOGGER.info("snapshot_deleted", snapshot_path=str(entry.path))
        return True
