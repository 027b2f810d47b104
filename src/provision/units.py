"""Systemd unit file generation."""

from __future__ import annotations

from pathlib import Path

from core.config import SnapConfig
from core.constants import CLEANUP_SERVICE_NAME
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def render_creation_service(config: SnapConfig) -> str:
    """Render the boot snapshot oneshot service."""
    script = config.creation_script_path
    return f"""[Unit]
Description=Create BTRFS snapshot on boot (btrsnap)
Documentation=man:btrfs-subvolume(8)
DefaultDependencies=no
After=local-fs.target time-sync.target
Before=sysinit.target shutdown.target
ConditionPathExists={script}
ConditionFileSystem=/ btrfs

[Service]
Type=oneshot
RemainAfterExit=no
ExecStart={script}
StandardOutput=journal
StandardError=journal

[Install]
WantedBy=sysinit.target
"""


def render_cleanup_service(config: SnapConfig) -> str:
    """Render the retention oneshot service."""
    script = config.cleanup_script_path
    return f"""[Unit]
Description=Clean up old BTRFS snapshots (btrsnap)
Documentation=man:btrfs-subvolume(8)
ConditionPathExists={script}

[Service]
Type=oneshot
ExecStart={script}
StandardOutput=journal
StandardError=journal
"""


def render_cleanup_timer() -> str:
    """Render the daily timer driving the cleanup service."""
    return f"""[Unit]
Description=Run BTRFS snapshot cleanup daily (btrsnap)

[Timer]
OnCalendar=daily
Persistent=true
Unit={CLEANUP_SERVICE_NAME}

[Install]
WantedBy=timers.target
"""


def write_unit_files(config: SnapConfig) -> list[Path]:
    """Write the three unit files into the configured unit directory.

    Returns:
        Written unit paths.
    """
    units = (
        (config.creation_service_path, render_creation_service(config)),
        (config.cleanup_service_path, render_cleanup_service(config)),
        (config.cleanup_timer_path, render_cleanup_timer()),
    )
    written: list[Path] = []
    for path, content in units:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        _LOGGER.info("unit_file_written", path=str(path))
        written.append(path)
    return written
