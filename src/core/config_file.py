"""YAML configuration file parsing.

The file is a flat mapping of SnapConfig field names to values,
for example ``snapshot_dir: /.snapshots`` and ``keep_latest: 10``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, cast

import yaml

from core.errors import SnapConfigError

SUPPORTED_CONFIG_KEYS = (
    "snapshot_dir",
    "source_subvolume",
    "snapshot_prefix",
    "keep_latest",
    "snapshot_manager",
    "lock_path",
    "creation_script_path",
    "cleanup_script_path",
    "unit_dir",
    "grub_btrfs_config_path",
    "grub_cfg_path",
    "timeshift_config_path",
)


def load_config_file(config_path: str) -> dict[str, object]:
    """Load and validate a YAML configuration file.

    Args:
        config_path: File path to the YAML document.

    Returns:
        Mapping of supported field names to raw values.

    Raises:
        SnapConfigError: If the file is missing, unreadable, or has unknown keys.
    """
    payload = _load_yaml_payload(config_path)
    mapping = _expect_mapping(payload, config_path)
    unknown_keys = sorted(set(mapping) - set(SUPPORTED_CONFIG_KEYS))
    if unknown_keys:
        raise SnapConfigError(
            f"Unsupported keys in config file {config_path}: {', '.join(unknown_keys)}. "
            f"Supported keys: {', '.join(SUPPORTED_CONFIG_KEYS)}."
        )
    return dict(mapping)


def _load_yaml_payload(config_path: str) -> object:
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise SnapConfigError(
            f"Config file does not exist at {config_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise SnapConfigError(
            f"Failed to read config file at {config_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise SnapConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    return payload


def _expect_mapping(value: object, config_path: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise SnapConfigError(
            f"Invalid config file {config_path}: expected mapping, got {type(value).__name__}."
        )
    normalized: dict[str, object] = {}
    for key, payload in value.items():
        if not isinstance(key, str):
            raise SnapConfigError(
                f"Invalid config file {config_path}: expected string keys, "
                f"got {type(key).__name__}."
            )
        normalized[key] = payload
    return normalized
