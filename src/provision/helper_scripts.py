"""Generated helper executables.

The boot service and cleanup timer run small shell wrappers that call
the btrsnap CLI with the configuration baked in as flags.
"""

from __future__ import annotations

import shlex
import shutil
import sys
from pathlib import Path

from core.config import SnapConfig
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)
_EXECUTABLE_MODE = 0o755


def resolve_cli_command() -> list[str]:
    """Return the argv prefix that invokes the installed btrsnap CLI."""
    installed = shutil.which("btrsnap")
    if installed:
        return [installed]
    return [sys.executable, "-m", "cli"]


def render_creation_script(config: SnapConfig, cli_command: list[str]) -> str:
    """Render the boot snapshot executable."""
    args = [
        *cli_command,
        "--snapshot-dir",
        str(config.snapshot_dir),
        "--source",
        str(config.source_subvolume),
        "--prefix",
        config.snapshot_prefix,
        "--lock-path",
        str(config.lock_path),
        "create",
    ]
    return _render_wrapper("Create a read-only Btrfs snapshot of the root subvolume on boot.", args)


def render_cleanup_script(config: SnapConfig, cli_command: list[str]) -> str:
    """Render the retention executable."""
    args = [
        *cli_command,
        "--snapshot-dir",
        str(config.snapshot_dir),
        "--prefix",
        config.snapshot_prefix,
        "--lock-path",
        str(config.lock_path),
        "cleanup",
        "--keep",
        str(config.keep_latest),
    ]
    return _render_wrapper("Keep the latest Btrfs boot snapshots and delete older ones.", args)


def write_helper_scripts(config: SnapConfig, cli_command: list[str] | None = None) -> list[Path]:
    """Write both helper executables.

    Args:
        config: Runtime configuration with script paths.
        cli_command: Optional argv prefix, resolved from PATH by default.

    Returns:
        Written script paths.
    """
    command = cli_command or resolve_cli_command()
    scripts = (
        (config.creation_script_path, render_creation_script(config, command)),
        (config.cleanup_script_path, render_cleanup_script(config, command)),
    )
    written: list[Path] = []
    for path, content in scripts:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        path.chmod(_EXECUTABLE_MODE)
        _LOGGER.info("helper_script_written", path=str(path))
        written.append(path)
    return written


def _render_wrapper(description: str, args: list[str]) -> str:
    return "\n".join(
        [
            "#!/bin/sh",
            f"# {description}",
            "# Generated by btrsnap setup; rerun setup to change settings.",
            f"exec {shlex.join(args)}",
            "",
        ]
    )
