"""Core constants used across btrsnap modules.

This module centralizes default paths, unit names, and fixed payloads.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_SNAPSHOT_DIR = Path("/.snapshots")
DEFAULT_SOURCE_SUBVOLUME = Path("/")
DEFAULT_SNAPSHOT_PREFIX = "boot_auto_snap"
DEFAULT_KEEP_LATEST = 7
DEFAULT_SNAPSHOT_MANAGER = "auto"
SUPPORTED_SNAPSHOT_MANAGERS = ("auto", "timeshift", "custom")
DEFAULT_LOCK_PATH = Path("/run/btrsnap.lock")
SNAPSHOT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H%M%S"
SNAPSHOT_NAME_SEPARATOR = "_"
COLLISION_SUFFIX_SEPARATOR = "-"

DEFAULT_CREATION_SCRIPT_PATH = Path("/usr/local/bin/create-btrfs-boot-snapshot")
DEFAULT_CLEANUP_SCRIPT_PATH = Path("/usr/local/bin/manage-btrfs-snapshots")
DEFAULT_UNIT_DIR = Path("/etc/systemd/system")
CREATION_SERVICE_NAME = "btrfs-boot-snapshot.service"
CLEANUP_SERVICE_NAME = "btrfs-snapshot-cleanup.service"
CLEANUP_TIMER_NAME = "btrfs-snapshot-cleanup.timer"

BTRFS_FILESYSTEM_TYPE = "btrfs"
GRUB_DIR = Path("/boot/grub")
GRUB_CFG_PATH = GRUB_DIR / "grub.cfg"
GRUB_MKCONFIG_COMMAND = "grub-mkconfig"
GRUB_BTRFS_COMMAND = "grub-btrfs"
GRUB_BTRFS_CONFIG_PATH = Path("/etc/default/grub-btrfs/config")
GRUB_BTRFS_SNAPSHOT_DIR_KEY = "GRUB_BTRFS_SNAPSHOT_DIR"
GRUB_BTRFS_AUR_URL = "https://aur.archlinux.org/grub-btrfs.git"
GRUB_BTRFS_BUILD_DIR_PREFIX = "/tmp/grub-btrfs-aur-build-"
GRUB_BTRFS_PACKAGE_GLOB = "grub-btrfs*.pkg.tar.*"
GRUB_BTRFS_MONITOR_UNITS = (
    "grub-btrfsd.path",
    "grub-btrfs.path",
    "grub-btrfsd.service",
    "grub-btrfs.service",
)
PREREQUISITE_PACKAGES = ("btrfs-progs", "git", "base-devel", "timeshift")

TIMESHIFT_COMMAND = "timeshift"
TIMESHIFT_PACKAGE = "timeshift"
TIMESHIFT_AUR_PACKAGE = "timeshift-bin"
AUR_HELPER_COMMAND = "yay"
TIMESHIFT_CONFIG_PATH = Path("/etc/timeshift/timeshift.json")
TIMESHIFT_TEST_COMMENT = "Test snapshot from btrsnap fix-timeshift"
TIMESHIFT_TEST_TIMEOUT_SECONDS = 30
TIMESHIFT_EXCLUDE_PATTERNS = (
    "+ /home/**",
    "+ /root/**",
    "- /var/run/**",
    "- /var/cache/**",
    "- /lost+found/**",
    "- /tmp/**",
    "- /boot/efi/EFI/arch",
)
TIMESHIFT_SCHEDULE_COUNTS = (
    ("monthly", 2),
    ("weekly", 3),
    ("daily", 5),
    ("hourly", 6),
    ("boot", 5),
)
TIMESHIFT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONFIG_ENV_VAR = "BTRSNAP_CONFIG"
