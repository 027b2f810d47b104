"""Typed models for host verification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from core.config import SnapConfig
from core.types import SnapshotManagerKind
from provision.host import Host

VerificationMode = Literal["quick", "full"]
VerificationStatus = Literal["passed", "failed", "skipped"]


class CheckSkipped(Exception):
    """Raised by a check that does not apply to the active snapshot manager."""


@dataclass(frozen=True)
class VerificationOptions:
    """Options controlling verification execution."""

    mode: VerificationMode
    fail_fast: bool


@dataclass(frozen=True)
class VerificationCheckResult:
    """One verification check result row."""

    check_id: str
    title: str
    status: VerificationStatus
    details: str
    duration_seconds: float


@dataclass(frozen=True)
class VerificationReport:
    """Outcome of one verification run against a host."""

    mode: VerificationMode
    manager: str
    snapshot_dir: str
    checks: tuple[VerificationCheckResult, ...]

    @property
    def failed_count(self) -> int:
        return self._count("failed")

    @property
    def passed_count(self) -> int:
        return self._count("passed")

    @property
    def skipped_count(self) -> int:
        return self._count("skipped")

    def _count(self, status: VerificationStatus) -> int:
        return sum(1 for check in self.checks if check.status == status)


@dataclass(frozen=True)
class VerificationRuntime:
    """Configuration, host adapters, and the manager that owns snapshots."""

    config: SnapConfig
    host: Host
    manager: SnapshotManagerKind
