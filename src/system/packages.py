"""Package installation through pacman and an AUR helper."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from core.constants import AUR_HELPER_COMMAND
from core.logging_config import get_logger
from system.commands import CommandRunner

_LOGGER = get_logger(__name__)


class PackageManager:
    """Arch Linux package operations."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def command_available(self, command: str) -> bool:
        """Whether an executable is resolvable on PATH."""
        return self._runner.which(command) is not None

    def install(self, packages: Sequence[str]) -> bool:
        """Install repository packages, skipping ones already up to date."""
        result = self._runner.run(["pacman", "-Sy", "--needed", "--noconfirm", *packages])
        if not result.ok:
            _LOGGER.warning(
                "package_install_failed",
                packages=list(packages),
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result.ok

    def install_local_package(self, package_file: Path) -> bool:
        """Install a locally built package archive."""
        return self._runner.run(["pacman", "-U", "--noconfirm", str(package_file)]).ok

    def install_with_aur_helper(self, package: str) -> bool:
        """Install an AUR package through the configured helper, if present."""
        if not self.command_available(AUR_HELPER_COMMAND):
            return False
        return self._runner.run([AUR_HELPER_COMMAND, "-S", "--noconfirm", package]).ok
