"""Host provisioning workflows.

This module configures the snapshot subvolume, helper executables,
systemd units, grub-btrfs, and the optional Timeshift handoff.
"""
