"""Public SDK surface for btrsnap.

This module provides a stable import path for scripting snapshot tasks.
It re-exports the workflows and typed models.
"""

from __future__ import annotations

from core.config import SnapConfig
from core.types import CreationResult, RetentionOutcome, SetupReport, SnapshotEntry
from provision.host import Host, build_host
from provision.setup_workflow import run_setup
from provision.timeshift import run_timeshift_fix
from snapshots.creation import SnapshotCreator
from snapshots.listing import list_snapshots
from snapshots.retention import RetentionPolicy, select_expired

__all__ = [
    "CreationResult",
    "Host",
    "RetentionOutcome",
    "RetentionPolicy",
    "SetupReport",
    "SnapConfig",
    "SnapshotCreator",
    "SnapshotEntry",
    "build_host",
    "list_snapshots",
    "run_setup",
    "run_timeshift_fix",
    "select_expired",
]
