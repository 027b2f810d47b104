"""Runtime configuration model for btrsnap.

This module owns all environment variable and config file parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from core.config_file import load_config_file
from core.constants import (
    CLEANUP_SERVICE_NAME,
    CLEANUP_TIMER_NAME,
    CONFIG_ENV_VAR,
    CREATION_SERVICE_NAME,
    DEFAULT_CLEANUP_SCRIPT_PATH,
    DEFAULT_CREATION_SCRIPT_PATH,
    DEFAULT_KEEP_LATEST,
    DEFAULT_LOCK_PATH,
    DEFAULT_SNAPSHOT_DIR,
    DEFAULT_SNAPSHOT_MANAGER,
    DEFAULT_SNAPSHOT_PREFIX,
    DEFAULT_SOURCE_SUBVOLUME,
    DEFAULT_UNIT_DIR,
    GRUB_BTRFS_CONFIG_PATH,
    GRUB_CFG_PATH,
    SNAPSHOT_NAME_SEPARATOR,
    SUPPORTED_SNAPSHOT_MANAGERS,
    TIMESHIFT_CONFIG_PATH,
)
from core.errors import SnapConfigError

_ENV_FIELDS = {
    "BTRSNAP_SNAPSHOT_DIR": "snapshot_dir",
    "BTRSNAP_SOURCE": "source_subvolume",
    "BTRSNAP_PREFIX": "snapshot_prefix",
    "BTRSNAP_KEEP_LATEST": "keep_latest",
    "BTRSNAP_SNAPSHOT_MANAGER": "snapshot_manager",
    "BTRSNAP_LOCK_PATH": "lock_path",
}
_PATH_FIELDS = frozenset(
    {
        "snapshot_dir",
        "source_subvolume",
        "lock_path",
        "creation_script_path",
        "cleanup_script_path",
        "unit_dir",
        "grub_btrfs_config_path",
        "grub_cfg_path",
        "timeshift_config_path",
    }
)


@dataclass(frozen=True)
class SnapConfig:
    """Validated runtime configuration.

    Attributes:
        snapshot_dir: Subvolume holding snapshot entries.
        source_subvolume: Subvolume captured by boot snapshots.
        snapshot_prefix: Name prefix of snapshots owned by btrsnap.
        keep_latest: Number of newest snapshots kept by retention.
        snapshot_manager: One of ``auto``, ``timeshift``, ``custom``.
        lock_path: Lock file guarding creation and cleanup.
        creation_script_path: Generated boot snapshot executable.
        cleanup_script_path: Generated retention executable.
        unit_dir: Directory receiving generated systemd units.
        grub_btrfs_config_path: grub-btrfs configuration file.
        grub_cfg_path: GRUB configuration output path.
        timeshift_config_path: Timeshift JSON configuration file.
    """

    snapshot_dir: Path = DEFAULT_SNAPSHOT_DIR
    source_subvolume: Path = DEFAULT_SOURCE_SUBVOLUME
    snapshot_prefix: str = DEFAULT_SNAPSHOT_PREFIX
    keep_latest: int = DEFAULT_KEEP_LATEST
    snapshot_manager: str = DEFAULT_SNAPSHOT_MANAGER
    lock_path: Path = DEFAULT_LOCK_PATH
    creation_script_path: Path = DEFAULT_CREATION_SCRIPT_PATH
    cleanup_script_path: Path = DEFAULT_CLEANUP_SCRIPT_PATH
    unit_dir: Path = DEFAULT_UNIT_DIR
    grub_btrfs_config_path: Path = GRUB_BTRFS_CONFIG_PATH
    grub_cfg_path: Path = GRUB_CFG_PATH
    timeshift_config_path: Path = TIMESHIFT_CONFIG_PATH

    @property
    def retention_prefix(self) -> str:
        """Name prefix matched by retention, including the separator."""
        return f"{self.snapshot_prefix}{SNAPSHOT_NAME_SEPARATOR}"

    @property
    def creation_service_path(self) -> Path:
        """Path of the boot snapshot service unit."""
        return self.unit_dir / CREATION_SERVICE_NAME

    @property
    def cleanup_service_path(self) -> Path:
        """Path of the cleanup service unit."""
        return self.unit_dir / CLEANUP_SERVICE_NAME

    @property
    def cleanup_timer_path(self) -> Path:
        """Path of the daily cleanup timer unit."""
        return self.unit_dir / CLEANUP_TIMER_NAME

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "SnapConfig":
        """Build config from defaults, an optional YAML file, and environment.

        Args:
            config_path: Optional YAML file; falls back to ``BTRSNAP_CONFIG``.
            environ: Environment mapping, defaults to ``os.environ``.

        Returns:
            A validated config object.

        Raises:
            SnapConfigError: If any value is invalid.
        """
        env = os.environ if environ is None else environ
        file_path = config_path or env.get(CONFIG_ENV_VAR)
        overrides: dict[str, object] = {}
        if file_path:
            overrides.update(load_config_file(file_path))
        for env_name, field_name in _ENV_FIELDS.items():
            raw_value = env.get(env_name)
            if raw_value:
                overrides[field_name] = raw_value
        return cls().with_overrides(overrides)

    def with_overrides(self, overrides: Mapping[str, object]) -> "SnapConfig":
        """Return a validated copy with selected fields replaced.

        Args:
            overrides: Field name to raw value mapping; ``None`` values are ignored.

        Returns:
            New config object.

        Raises:
            SnapConfigError: If a value is invalid.
        """
        normalized: dict[str, object] = {}
        for field_name, raw_value in overrides.items():
            if raw_value is None:
                continue
            normalized[field_name] = _normalize_field(field_name, raw_value)
        return replace(self, **normalized)


def _normalize_field(field_name: str, raw_value: object) -> object:
    if field_name in _PATH_FIELDS:
        return _parse_path(field_name, raw_value)
    if field_name == "keep_latest":
        return _parse_keep_latest(raw_value)
    if field_name == "snapshot_manager":
        return _parse_snapshot_manager(raw_value)
    if field_name == "snapshot_prefix":
        return _parse_prefix(raw_value)
    raise SnapConfigError(f"Unknown configuration field '{field_name}'.")


def _parse_path(field_name: str, raw_value: object) -> Path:
    if isinstance(raw_value, Path):
        return raw_value
    if not isinstance(raw_value, str) or not raw_value.strip():
        raise SnapConfigError(
            f"Invalid {field_name} value: expected non-empty path, got {raw_value!r}."
        )
    path = Path(raw_value).expanduser()
    if not path.is_absolute():
        raise SnapConfigError(
            f"Invalid {field_name} value '{raw_value}': expected an absolute path."
        )
    return path


def _parse_keep_latest(raw_value: object) -> int:
    """Parse the retention count.

    Args:
        raw_value: Integer or numeric string.

    Returns:
        Parsed positive integer.

    Raises:
        SnapConfigError: If value is not a positive integer.
    """
    if isinstance(raw_value, bool):
        raise SnapConfigError("Invalid keep_latest value: expected integer, got boolean.")
    try:
        keep_latest = int(str(raw_value).strip())
    except ValueError as error:
        raise SnapConfigError(
            "Invalid keep_latest value: "
            f"expected integer, got '{raw_value}'. "
            "Set BTRSNAP_KEEP_LATEST to a positive number."
        ) from error
    if keep_latest < 1:
        raise SnapConfigError(
            f"Invalid keep_latest value {keep_latest}: keep at least one snapshot."
        )
    return keep_latest


def _parse_snapshot_manager(raw_value: object) -> str:
    manager = str(raw_value).strip().lower()
    if manager not in SUPPORTED_SNAPSHOT_MANAGERS:
        raise SnapConfigError(
            f"Unsupported snapshot_manager '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_SNAPSHOT_MANAGERS)}."
        )
    return manager


def _parse_prefix(raw_value: object) -> str:
    prefix = str(raw_value).strip()
    if not prefix or "/" in prefix:
        raise SnapConfigError(
            f"Invalid snapshot_prefix '{raw_value}': expected a non-empty name without '/'."
        )
    return prefix
