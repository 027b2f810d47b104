"""Unit tests for snapshot subvolume provisioning."""

from __future__ import annotations

import pytest

from core.errors import SnapProvisionError
from provision.host import build_host
from provision.subvolume import ensure_snapshot_subvolume
from tests.fakes import FakeRunner, fail


def test_existing_subvolume_is_left_alone(tmp_path) -> None:
    """An existing subvolume should not be recreated."""
    runner = FakeRunner()

    created = ensure_snapshot_subvolume(build_host(runner), tmp_path / "snaps")

    assert not created and runner.called("btrfs", "subvolume", "create") == []


def test_missing_subvolume_is_created(tmp_path) -> None:
    """A missing path should become a new subvolume."""
    runner = FakeRunner().on(("btrfs", "subvolume", "show"), fail())

    created = ensure_snapshot_subvolume(build_host(runner), tmp_path / "snaps")

    assert created and runner.called("btrfs", "subvolume", "create")


def test_regular_directory_kept_when_user_declines(tmp_path) -> None:
    """Declining removal should abort and keep the directory."""
    snapshot_dir = tmp_path / "snaps"
    snapshot_dir.mkdir()
    runner = FakeRunner().on(("btrfs", "subvolume", "show"), fail())
    host = build_host(runner, confirm=lambda prompt: False)

    with pytest.raises(SnapProvisionError):
        ensure_snapshot_subvolume(host, snapshot_dir)

    assert snapshot_dir.is_dir()


def test_regular_directory_replaced_when_confirmed(tmp_path) -> None:
    """Confirming should remove the directory before creating the subvolume."""
    snapshot_dir = tmp_path / "snaps"
    snapshot_dir.mkdir()
    (snapshot_dir / "leftover").write_text("x", encoding="utf-8")
    runner = FakeRunner().on(("btrfs", "subvolume", "show"), fail())
    host = build_host(runner, confirm=lambda prompt: True)

    created = ensure_snapshot_subvolume(host, snapshot_dir)

    assert created and not snapshot_dir.exists()


def test_create_failure_aborts(tmp_path) -> None:
    """A failed subvolume create should raise."""
    runner = (
        FakeRunner()
        .on(("btrfs", "subvolume", "show"), fail())
        .on(("btrfs", "subvolume", "create"), fail())
    )

    with pytest.raises(SnapProvisionError):
        ensure_snapshot_subvolume(build_host(runner), tmp_path / "snaps")
