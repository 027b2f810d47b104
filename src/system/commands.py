"""External command execution.

Every interaction with host tooling goes through a CommandRunner so
higher layers can be exercised with scripted fakes in tests.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from core.errors import SnapCommandError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Completed external command.

    Attributes:
        args: Executed argument vector.
        returncode: Process exit status; ``-1`` when the command timed out.
        stdout: Captured standard output.
        stderr: Captured standard error.
        timed_out: Whether the wall-clock limit was hit.
    """

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """Whether the command exited with status zero."""
        return self.returncode == 0 and not self.timed_out


class CommandRunner(Protocol):
    """Runs argv-style commands and reports their outcome."""

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        cwd: Path | None = None,
        run_as_user: str | None = None,
    ) -> CommandResult:
        """Run one command and capture its output."""
        ...

    def which(self, command: str) -> str | None:
        """Return the resolved path of a command, or None when absent."""
        ...


class SubprocessRunner:
    """CommandRunner backed by :mod:`subprocess`."""

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        cwd: Path | None = None,
        run_as_user: str | None = None,
    ) -> CommandResult:
        """Run one command and capture its output.

        Args:
            args: Argument vector, never passed through a shell.
            timeout: Optional wall-clock limit in seconds.
            cwd: Optional working directory.
            run_as_user: Run through ``sudo -u <user>`` when set.

        Returns:
            Captured command result. Non-zero exits are returned, not raised.

        Raises:
            SnapCommandError: If the executable cannot be started.
        """
        argv = list(args)
        if run_as_user:
            argv = ["sudo", "-u", run_as_user, *argv]
        _LOGGER.debug("command_started", args=argv, cwd=str(cwd) if cwd else None)
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=cwd,
                check=False,
            )
        except subprocess.TimeoutExpired as error:
            _LOGGER.warning("command_timed_out", args=argv, timeout=timeout)
            return CommandResult(
                args=tuple(argv),
                returncode=-1,
                stdout=_decode(error.stdout),
                stderr=_decode(error.stderr),
                timed_out=True,
            )
        except OSError as error:
            raise SnapCommandError(
                f"Failed to execute '{' '.join(argv)}': {error}. "
                "Check that the tool is installed and on PATH."
            ) from error
        result = CommandResult(
            args=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
        _LOGGER.debug("command_finished", args=argv, returncode=result.returncode)
        return result

    def which(self, command: str) -> str | None:
        """Return the resolved path of a command, or None when absent."""
        return shutil.which(command)


def _decode(payload: bytes | str | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return payload
