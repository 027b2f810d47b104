"""Snapshot naming.

Names are ``<prefix>_<YYYY-MM-DD_HHMMSS>``; lexicographic order of names
matches creation order. A second snapshot within the same second gets a
``-2``, ``-3``, ... suffix, which still sorts before the next second.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from core.constants import (
    COLLISION_SUFFIX_SEPARATOR,
    SNAPSHOT_NAME_SEPARATOR,
    SNAPSHOT_TIMESTAMP_FORMAT,
)
from core.errors import SnapCreationError

_MAX_COLLISION_SUFFIX = 99


def build_snapshot_name(prefix: str, timestamp: datetime) -> str:
    """Build the canonical snapshot name for a timestamp."""
    return f"{prefix}{SNAPSHOT_NAME_SEPARATOR}{timestamp.strftime(SNAPSHOT_TIMESTAMP_FORMAT)}"


def parse_snapshot_timestamp(name: str, prefix: str) -> datetime | None:
    """Recover the timestamp embedded in a snapshot name.

    Args:
        name: Snapshot directory name.
        prefix: Configured snapshot prefix, without separator.

    Returns:
        Parsed timestamp, or None if the name does not follow the scheme.
    """
    head = f"{prefix}{SNAPSHOT_NAME_SEPARATOR}"
    if not name.startswith(head):
        return None
    stamp = name[len(head) :].split(COLLISION_SUFFIX_SEPARATOR, 1)[0]
    try:
        return datetime.strptime(stamp, SNAPSHOT_TIMESTAMP_FORMAT)
    except ValueError:
        return None


def unique_snapshot_path(snapshot_dir: Path, prefix: str, timestamp: datetime) -> Path:
    """Return a snapshot path that does not exist yet.

    Args:
        snapshot_dir: Directory receiving the snapshot.
        prefix: Snapshot name prefix.
        timestamp: Creation timestamp.

    Returns:
        ``<dir>/<name>`` or ``<dir>/<name>-<n>`` for the first free ``n``.

    Raises:
        SnapCreationError: If every disambiguated name is taken.
    """
    base_name = build_snapshot_name(prefix, timestamp)
    candidate = snapshot_dir / base_name
    if not candidate.exists():
        return candidate
    for suffix in range(2, _MAX_COLLISION_SUFFIX + 1):
        candidate = snapshot_dir / f"{base_name}{COLLISION_SUFFIX_SEPARATOR}{suffix}"
        if not candidate.exists():
            return candidate
    raise SnapCreationError(
        f"Too many snapshots named {base_name} in {snapshot_dir}. "
        "Wait a second before creating another snapshot."
    )
