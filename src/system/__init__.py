"""Host system adapters.

This module wraps btrfs, systemd, pacman, and mount-table tooling.
Callers receive typed answers instead of raw command output.
"""
