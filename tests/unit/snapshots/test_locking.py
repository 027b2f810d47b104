"""Unit tests for the snapshot directory lock."""

from __future__ import annotations

import pytest

from core.errors import SnapBusyError
from snapshots.locking import snapshot_lock


def test_second_holder_is_rejected(tmp_path) -> None:
    """A nested acquisition should fail fast instead of waiting."""
    lock_path = tmp_path / "btrsnap.lock"

    with snapshot_lock(lock_path):
        with pytest.raises(SnapBusyError):
            with snapshot_lock(lock_path):
                pass


def test_lock_is_released_after_block(tmp_path) -> None:
    """The lock should be reusable once the holder exits."""
    lock_path = tmp_path / "run" / "btrsnap.lock"

    with snapshot_lock(lock_path):
        pass
    with snapshot_lock(lock_path):
        acquired = True

    assert acquired and lock_path.exists()
