"""Idempotent snapshot subvolume setup."""

from __future__ import annotations

import shutil
from pathlib import Path

from core.errors import SnapProvisionError
from core.logging_config import get_logger
from provision.host import Host

_LOGGER = get_logger(__name__)


def ensure_snapshot_subvolume(host: Host, snapshot_dir: Path) -> bool:
    """Make sure snapshot_dir is a Btrfs subvolume.

    A plain directory in the way is removed only after confirmation.

    Args:
        host: Host adapters.
        snapshot_dir: Desired subvolume path.

    Returns:
        True when a subvolume was created, False when it already existed.

    Raises:
        SnapProvisionError: If the directory cannot be replaced or creation fails.
    """
    if host.btrfs.subvolume_exists(snapshot_dir):
        _LOGGER.info("subvolume_present", path=str(snapshot_dir))
        return False
    if snapshot_dir.is_dir():
        _LOGGER.warning("subvolume_path_is_directory", path=str(snapshot_dir))
        if not host.confirm(
            f"{snapshot_dir} exists as a regular directory. Remove it and create a subvolume? "
            "(Ensure it's empty or backed up)"
        ):
            raise SnapProvisionError(
                f"Cannot proceed with {snapshot_dir} as a regular directory. Please handle manually."
            )
        try:
            shutil.rmtree(snapshot_dir)
        except OSError as error:
            raise SnapProvisionError(
                f"Failed to remove existing directory {snapshot_dir}: {error}. Please handle manually."
            ) from error
    result = host.btrfs.create_subvolume(snapshot_dir)
    if not result.ok:
        raise SnapProvisionError(
            f"Failed to create subvolume {snapshot_dir}: {result.stderr.strip() or result.returncode}."
        )
    _LOGGER.info("subvolume_created", path=str(snapshot_dir))
    return True
