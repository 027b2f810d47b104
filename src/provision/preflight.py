"""Host preconditions for provisioning workflows."""

from __future__ import annotations

from pathlib import Path

from core.constants import GRUB_DIR, GRUB_MKCONFIG_COMMAND
from core.errors import SnapPreflightError
from core.logging_config import get_logger
from provision.host import Host
from system.privileges import invoking_user, is_root

_LOGGER = get_logger(__name__)


def require_root() -> None:
    """Abort unless running with root privileges.

    Raises:
        SnapPreflightError: If the effective uid is not 0.
    """
    if not is_root():
        raise SnapPreflightError("This command must be run as root. Please use sudo.")


def require_invoking_user(host: Host) -> str:
    """Return the non-root sudo user needed for AUR builds.

    Raises:
        SnapPreflightError: If not invoked through sudo by a regular user.
    """
    user = invoking_user(host.environ)
    if user is None:
        raise SnapPreflightError(
            "Setup must be run with sudo by a non-root user to build AUR packages. "
            "From a root shell, 'su - <username>' and rerun with sudo."
        )
    return user


def require_btrfs_root(host: Host) -> None:
    """Abort unless the root filesystem is Btrfs."""
    if not host.btrfs.is_btrfs(Path("/")):
        raise SnapPreflightError(
            "Root filesystem is not Btrfs. btrsnap supports Btrfs systems only."
        )


def require_grub(host: Host, grub_dir: Path = GRUB_DIR) -> None:
    """Abort unless GRUB and grub-mkconfig are present."""
    if not grub_dir.is_dir() or not host.packages.command_available(GRUB_MKCONFIG_COMMAND):
        raise SnapPreflightError(
            "GRUB bootloader not detected or grub-mkconfig not found. btrsnap requires GRUB."
        )


def run_setup_preflight(host: Host, grub_dir: Path = GRUB_DIR) -> str:
    """Run every setup precondition in order.

    Returns:
        Name of the invoking sudo user.

    Raises:
        SnapPreflightError: On the first failed precondition.
    """
    require_root()
    user = require_invoking_user(host)
    require_btrfs_root(host)
    require_grub(host, grub_dir)
    _LOGGER.info("preflight_passed", invoking_user=user)
    return user
