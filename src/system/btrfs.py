"""Btrfs filesystem primitives.

This module wraps ``findmnt`` and ``btrfs subvolume`` commands behind
typed queries so snapshot logic never inspects command text.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import BTRFS_FILESYSTEM_TYPE
from core.logging_config import get_logger
from system.commands import CommandResult, CommandRunner

_LOGGER = get_logger(__name__)


class BtrfsTool:
    """Btrfs and mount-table operations executed through a CommandRunner."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize the tool.

        Args:
            runner: Command runner used for every invocation.
        """
        self._runner = runner

    def filesystem_type(self, path: Path) -> str | None:
        """Return the filesystem type backing a path, or None if unknown."""
        result = self._runner.run(["findmnt", "-n", "-o", "FSTYPE", "--target", str(path)])
        if not result.ok:
            return None
        fs_type = result.stdout.strip().splitlines()
        return fs_type[0].strip() if fs_type else None

    def is_btrfs(self, path: Path) -> bool:
        """Whether a path resides on a Btrfs filesystem."""
        return self.filesystem_type(path) == BTRFS_FILESYSTEM_TYPE

    def subvolume_exists(self, path: Path) -> bool:
        """Whether a path is an existing Btrfs subvolume."""
        return self._runner.run(["btrfs", "subvolume", "show", str(path)]).ok

    def create_subvolume(self, path: Path) -> CommandResult:
        """Create a new subvolume at path."""
        return self._log_result(
            "subvolume_create",
            self._runner.run(["btrfs", "subvolume", "create", str(path)]),
        )

    def snapshot_readonly(self, source: Path, destination: Path) -> CommandResult:
        """Create a read-only snapshot of source at destination."""
        return self._log_result(
            "subvolume_snapshot",
            self._runner.run(
                ["btrfs", "subvolume", "snapshot", "-r", str(source), str(destination)]
            ),
        )

    def delete_subvolume(self, path: Path) -> CommandResult:
        """Delete a subvolume or snapshot."""
        return self._log_result(
            "subvolume_delete",
            self._runner.run(["btrfs", "subvolume", "delete", str(path)]),
        )

    def sync(self) -> CommandResult:
        """Flush filesystem buffers to disk."""
        return self._runner.run(["sync"])

    def _log_result(self, operation: str, result: CommandResult) -> CommandResult:
        if not result.ok:
            _LOGGER.debug(
                "btrfs_command_failed",
                operation=operation,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result
