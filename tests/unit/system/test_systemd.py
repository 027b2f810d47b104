"""Unit tests for systemd unit queries."""

from __future__ import annotations

from core.types import UnitState
from system.systemd import SystemdManager
from tests.fakes import FakeRunner, fail, ok


def _listing_runner(listing: str) -> FakeRunner:
    return FakeRunner().on(("systemctl", "list-unit-files"), ok(listing))


def test_unit_state_reports_enabled_unit() -> None:
    """An enabled row should map to the enabled state."""
    runner = _listing_runner("grub-btrfsd.service enabled disabled\n")

    state = SystemdManager(runner).unit_state("grub-btrfsd.service")

    assert state is UnitState.ENABLED


def test_unit_exists_requires_exact_name() -> None:
    """A similarly named unit must not count as present."""
    runner = _listing_runner("grub-btrfsd.service disabled disabled\n")

    assert not SystemdManager(runner).unit_exists("grub-btrfs.service")


def test_unit_state_missing_on_empty_listing() -> None:
    """No listing rows should mean the unit is missing."""
    runner = FakeRunner().on(("systemctl", "list-unit-files"), fail(stderr=""))

    assert SystemdManager(runner).unit_state("btrfs-boot-snapshot.service") is UnitState.MISSING


def test_enable_now_passes_flag() -> None:
    """Enabling with now should pass --now to systemctl."""
    runner = FakeRunner()

    SystemdManager(runner).enable("grub-btrfsd.path", now=True)

    assert runner.calls[0].args == ("systemctl", "enable", "--now", "grub-btrfsd.path")
