"""Host adapter bundle shared by provisioning steps."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping

from provision.prompts import confirm_action
from system.btrfs import BtrfsTool
from system.commands import CommandRunner, SubprocessRunner
from system.packages import PackageManager
from system.systemd import SystemdManager

ConfirmCallable = Callable[[str], bool]


@dataclass
class Host:
    """Adapters and interaction hooks used by provisioning workflows.

    Attributes:
        runner: Command runner shared by every adapter.
        btrfs: Btrfs primitives.
        systemd: Unit control.
        packages: Package installation.
        confirm: Yes/no prompt; returns True to proceed.
        environ: Process environment snapshot.
    """

    runner: CommandRunner
    btrfs: BtrfsTool
    systemd: SystemdManager
    packages: PackageManager
    confirm: ConfirmCallable = confirm_action
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))


def build_host(
    runner: CommandRunner | None = None,
    confirm: ConfirmCallable | None = None,
) -> Host:
    """Build a Host wired to one command runner.

    Args:
        runner: Command runner, defaults to a subprocess runner.
        confirm: Prompt implementation, defaults to interactive stdin.

    Returns:
        Ready-to-use host bundle.
    """
    active_runner = runner or SubprocessRunner()
    return Host(
        runner=active_runner,
        btrfs=BtrfsTool(active_runner),
        systemd=SystemdManager(active_runner),
        packages=PackageManager(active_runner),
        confirm=confirm or confirm_action,
    )


def always_confirm(_prompt: str) -> bool:
    """Non-interactive confirmation used by ``--yes``."""
    return True
