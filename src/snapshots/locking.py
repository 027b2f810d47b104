"""Exclusive lock around snapshot directory mutations."""

from __future__ import annotations

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from core.errors import SnapBusyError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


@contextmanager
def snapshot_lock(lock_path: Path) -> Iterator[None]:
    """Hold a non-blocking exclusive flock for the duration of the block.

    Args:
        lock_path: Persistent lock file; created when missing.

    Raises:
        SnapBusyError: If another process holds the lock or it cannot be opened.
    """
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as error:
        raise SnapBusyError(f"Failed to open lock file {lock_path}: {error}.") from error
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as error:
            raise SnapBusyError(
                f"Another btrsnap process holds {lock_path}. Retry after it finishes."
            ) from error
        _LOGGER.debug("lock_acquired", lock_path=str(lock_path))
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            _LOGGER.debug("lock_released", lock_path=str(lock_path))
    finally:
        os.close(fd)
