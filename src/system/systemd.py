"""Systemd unit control.

Unit presence is answered by a typed query instead of grepping the full
``list-unit-files`` listing at every call site.
"""

from __future__ import annotations

from core.logging_config import get_logger
from core.types import UnitState
from system.commands import CommandResult, CommandRunner

_LOGGER = get_logger(__name__)
_ENABLED_STATES = frozenset({"enabled", "enabled-runtime", "static", "alias", "linked"})


class SystemdManager:
    """systemctl wrapper with typed capability queries."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def unit_exists(self, unit_name: str) -> bool:
        """Whether systemd knows a unit file with exactly this name."""
        return self.unit_state(unit_name) is not UnitState.MISSING

    def unit_state(self, unit_name: str) -> UnitState:
        """Return the install state of a unit file.

        Args:
            unit_name: Full unit name, e.g. ``grub-btrfsd.path``.

        Returns:
            Unit install state.
        """
        result = self._runner.run(
            ["systemctl", "list-unit-files", "--no-legend", "--no-pager", unit_name]
        )
        for line in result.stdout.splitlines():
            columns = line.split()
            if len(columns) >= 2 and columns[0] == unit_name:
                if columns[1] in _ENABLED_STATES:
                    return UnitState.ENABLED
                return UnitState.DISABLED
        return UnitState.MISSING

    def is_enabled(self, unit_name: str) -> bool:
        """Whether a unit is enabled."""
        return self._runner.run(["systemctl", "is-enabled", "--quiet", unit_name]).ok

    def is_active(self, unit_name: str) -> bool:
        """Whether a unit is currently active."""
        return self._runner.run(["systemctl", "is-active", "--quiet", unit_name]).ok

    def daemon_reload(self) -> bool:
        """Reload unit definitions."""
        return self._checked("daemon_reload", ["systemctl", "daemon-reload"])

    def enable(self, unit_name: str, now: bool = False) -> bool:
        """Enable a unit, optionally starting it."""
        args = ["systemctl", "enable", unit_name]
        if now:
            args.insert(2, "--now")
        return self._checked("unit_enable", args)

    def start(self, unit_name: str) -> bool:
        """Start a unit."""
        return self._checked("unit_start", ["systemctl", "start", unit_name])

    def stop(self, unit_name: str) -> bool:
        """Stop a unit."""
        return self._checked("unit_stop", ["systemctl", "stop", unit_name])

    def disable_now(self, unit_name: str) -> bool:
        """Disable and stop a unit."""
        return self._checked("unit_disable", ["systemctl", "disable", "--now", unit_name])

    def _checked(self, operation: str, args: list[str]) -> bool:
        result: CommandResult = self._runner.run(args)
        if not result.ok:
            _LOGGER.debug(
                "systemctl_failed",
                operation=operation,
                args=args,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result.ok
