"""Root block device discovery."""

from __future__ import annotations

import re
from pathlib import Path

from core.types import RootDeviceInfo
from system.commands import CommandRunner

_SUBVOL_PATTERN = re.compile(r"(?:^|,)subvol=([^,]+)")
_BRACKET_SUFFIX = re.compile(r"\[.*\]$")
_NVME_PARTITION_SUFFIX = re.compile(r"p\d+$")


def identify_root_device(runner: CommandRunner, mount_point: Path = Path("/")) -> RootDeviceInfo | None:
    """Resolve the mount source, subvolume, and parent disk of a mount point.

    Args:
        runner: Command runner used for findmnt and lsblk.
        mount_point: Mounted path to inspect.

    Returns:
        Root device details, or None when no block device can be resolved.
    """
    source = _findmnt_column(runner, "SOURCE", mount_point)
    options = _findmnt_column(runner, "OPTIONS", mount_point)
    if not source:
        return None
    device_path = _BRACKET_SUFFIX.sub("", source)
    block_device = _parent_block_device(runner, device_path)
    if not block_device:
        return None
    match = _SUBVOL_PATTERN.search(options)
    return RootDeviceInfo(
        source=source,
        mount_options=options,
        subvolume=match.group(1) if match else None,
        block_device=block_device,
    )


def _findmnt_column(runner: CommandRunner, column: str, mount_point: Path) -> str:
    result = runner.run(["findmnt", "-n", "-o", column, "--target", str(mount_point)])
    if not result.ok:
        return ""
    lines = result.stdout.strip().splitlines()
    return lines[0].split()[0] if lines and lines[0].split() else ""


def _parent_block_device(runner: CommandRunner, device_path: str) -> str:
    result = runner.run(["lsblk", "-no", "pkname", device_path])
    if result.ok and result.stdout.strip():
        return result.stdout.strip().splitlines()[0].strip()
    # Fall back to stripping the partition number from the device name.
    name = Path(device_path).name
    if name.startswith("nvme") or name.startswith("mmcblk"):
        return _NVME_PARTITION_SUFFIX.sub("", name)
    return name.rstrip("0123456789")
