"""Snapshot directory listing."""

from __future__ import annotations

import os
from pathlib import Path

from core.errors import SnapRetentionError
from core.types import SnapshotEntry


def list_snapshots(snapshot_dir: Path, prefix: str) -> list[SnapshotEntry]:
    """List snapshot directories whose name starts with prefix.

    Args:
        snapshot_dir: Snapshot root to scan, non-recursively.
        prefix: Required name prefix.

    Returns:
        Entries ordered by modification time, oldest first; ties by name.

    Raises:
        SnapRetentionError: If the directory is missing or unreadable.
    """
    if not snapshot_dir.is_dir():
        raise SnapRetentionError(
            f"Snapshot directory {snapshot_dir} does not exist. "
            "Run 'btrsnap setup' to create the snapshot subvolume."
        )
    entries: list[SnapshotEntry] = []
    try:
        with os.scandir(snapshot_dir) as iterator:
            for item in iterator:
                if not item.name.startswith(prefix):
                    continue
                if not item.is_dir(follow_symlinks=False):
                    continue
                entries.append(
                    SnapshotEntry(
                        name=item.name,
                        path=Path(item.path),
                        modified_at=item.stat(follow_symlinks=False).st_mtime,
                    )
                )
    except OSError as error:
        raise SnapRetentionError(
            f"Failed to list snapshot directory {snapshot_dir}: {error}."
        ) from error
    return sorted(entries, key=lambda entry: (entry.modified_at, entry.name))
