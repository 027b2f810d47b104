"""grub-btrfs installation, configuration, and GRUB regeneration.

grub-btrfs adds snapshot entries to the GRUB menu. It is built from the
AUR as the invoking sudo user because makepkg refuses to run as root.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from core.constants import (
    GRUB_BTRFS_AUR_URL,
    GRUB_BTRFS_BUILD_DIR_PREFIX,
    GRUB_BTRFS_COMMAND,
    GRUB_BTRFS_MONITOR_UNITS,
    GRUB_BTRFS_PACKAGE_GLOB,
    GRUB_BTRFS_SNAPSHOT_DIR_KEY,
)
from core.logging_config import get_logger
from provision.host import Host
from system.systemd import SystemdManager

_LOGGER = get_logger(__name__)


def ensure_grub_btrfs_installed(host: Host, build_user: str) -> bool:
    """Install grub-btrfs from the AUR unless it is already present.

    Failures are logged and reported, never raised.

    Args:
        host: Host adapters.
        build_user: Non-root user that runs git and makepkg.

    Returns:
        Whether grub-btrfs is available afterwards.
    """
    if host.packages.command_available(GRUB_BTRFS_COMMAND):
        _LOGGER.info("grub_btrfs_present")
        return True
    build_dir = Path(f"{GRUB_BTRFS_BUILD_DIR_PREFIX}{build_user}")
    try:
        installed = _build_and_install(host, build_user, build_dir)
    finally:
        shutil.rmtree(build_dir, ignore_errors=True)
    if installed:
        _LOGGER.info("grub_btrfs_installed")
        host.systemd.daemon_reload()
    else:
        _LOGGER.error(
            "grub_btrfs_install_failed",
            hint="Automatic GRUB menu entries for snapshots might not work.",
        )
    return installed


def _build_and_install(host: Host, build_user: str, build_dir: Path) -> bool:
    shutil.rmtree(build_dir, ignore_errors=True)
    try:
        build_dir.mkdir(parents=True)
        shutil.chown(build_dir, user=build_user)
    except (OSError, LookupError) as error:
        _LOGGER.error("aur_build_dir_failed", build_dir=str(build_dir), error=str(error))
        return False
    clone = host.runner.run(
        ["git", "clone", GRUB_BTRFS_AUR_URL, str(build_dir)],
        run_as_user=build_user,
    )
    if not clone.ok:
        _LOGGER.error("aur_clone_failed", url=GRUB_BTRFS_AUR_URL, stderr=clone.stderr.strip())
        return False
    build = host.runner.run(
        ["makepkg", "-s", "--noconfirm"],
        cwd=build_dir,
        run_as_user=build_user,
    )
    if not build.ok:
        _LOGGER.error("aur_build_failed", build_user=build_user, stderr=build.stderr.strip())
        return False
    package_files = sorted(build_dir.glob(GRUB_BTRFS_PACKAGE_GLOB))
    if not package_files:
        _LOGGER.error("aur_package_missing", build_dir=str(build_dir))
        return False
    return host.packages.install_local_package(package_files[0])


def ensure_snapshot_dir_setting(config_path: Path, snapshot_dir: Path) -> str:
    """Make the grub-btrfs config point at snapshot_dir.

    Args:
        config_path: grub-btrfs configuration file.
        snapshot_dir: Snapshot subvolume path.

    Returns:
        One of ``created``, ``appended``, ``updated``, ``unchanged``.
    """
    setting = f'{GRUB_BTRFS_SNAPSHOT_DIR_KEY}="{snapshot_dir}"'
    config_path.parent.mkdir(parents=True, exist_ok=True)
    if not config_path.exists():
        config_path.write_text(setting + "\n", encoding="utf-8")
        _LOGGER.info("grub_btrfs_config_created", path=str(config_path))
        return "created"
    lines = config_path.read_text(encoding="utf-8").splitlines()
    key_prefix = f"{GRUB_BTRFS_SNAPSHOT_DIR_KEY}="
    if not any(line.startswith(key_prefix) for line in lines):
        lines.append(setting)
        action = "appended"
    elif setting in lines:
        return "unchanged"
    else:
        lines = [setting if line.startswith(key_prefix) else line for line in lines]
        action = "updated"
    config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    _LOGGER.info("grub_btrfs_config_changed", path=str(config_path), action=action)
    return action


def discover_monitor_unit(
    systemd: SystemdManager,
    candidates: tuple[str, ...] = GRUB_BTRFS_MONITOR_UNITS,
) -> str | None:
    """Return the first installed grub-btrfs monitoring unit.

    Path units are preferred over service units.
    """
    for unit_name in candidates:
        if systemd.unit_exists(unit_name):
            _LOGGER.info("grub_btrfs_monitor_found", unit=unit_name)
            return unit_name
    _LOGGER.warning(
        "grub_btrfs_monitor_missing",
        hint="Look for grub-btrfsd.path and run 'systemctl enable --now grub-btrfsd.path'.",
    )
    return None


def regenerate_grub_config(host: Host, grub_cfg_path: Path) -> bool:
    """Run grub-mkconfig; failure is logged, not raised."""
    _LOGGER.info("grub_config_regenerating", output=str(grub_cfg_path))
    result = host.runner.run(["grub-mkconfig", "-o", str(grub_cfg_path)])
    if result.ok:
        _LOGGER.info("grub_config_updated", output=str(grub_cfg_path))
        return True
    _LOGGER.error(
        "grub_config_update_failed",
        returncode=result.returncode,
        hint=f"Run 'sudo grub-mkconfig -o {grub_cfg_path}' manually.",
    )
    return False
