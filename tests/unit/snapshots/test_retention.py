"""Unit tests for count-based snapshot retention."""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import pytest

from core.config import SnapConfig
from core.errors import SnapRetentionError
from core.types import SnapshotEntry
from snapshots.retention import RetentionPolicy, select_expired
from system.btrfs import BtrfsTool
from system.commands import CommandResult
from tests.fakes import FakeRunner


def _make_snapshots(snapshot_dir: Path, count: int, prefix: str = "boot_auto_snap") -> list[Path]:
    paths = []
    for index in range(count):
        path = snapshot_dir / f"{prefix}_2024-01-01_{index:06d}"
        path.mkdir(parents=True)
        os.utime(path, (1_700_000_000 + index, 1_700_000_000 + index))
        paths.append(path)
    return paths


def _config(tmp_path: Path, keep_latest: int = 7) -> SnapConfig:
    return replace(
        SnapConfig(),
        snapshot_dir=tmp_path / "snapshots",
        keep_latest=keep_latest,
        lock_path=tmp_path / "btrsnap.lock",
    )


def _deleting_runner(fail_names: set[str] | None = None) -> FakeRunner:
    failing = fail_names or set()

    def _delete(argv: tuple[str, ...]) -> CommandResult:
        path = Path(argv[-1])
        if path.name in failing:
            return CommandResult(args=argv, returncode=1, stderr="ERROR: cannot delete")
        path.rmdir()
        return CommandResult(args=argv, returncode=0)

    return FakeRunner().on(("btrfs", "subvolume", "delete"), _delete)


def test_apply_deletes_oldest_beyond_keep_count(tmp_path) -> None:
    """Ten snapshots with keep=7 should lose exactly the three oldest."""
    config = _config(tmp_path, keep_latest=7)
    paths = _make_snapshots(config.snapshot_dir, 10)
    policy = RetentionPolicy(config, BtrfsTool(_deleting_runner()))

    outcome = policy.apply()

    remaining = sorted(path.name for path in config.snapshot_dir.iterdir())
    assert outcome.deleted == tuple(paths[:3])
    assert remaining == [path.name for path in paths[3:]]


def test_apply_keeps_everything_when_under_limit(tmp_path) -> None:
    """No deletion should happen when count does not exceed the limit."""
    config = _config(tmp_path, keep_latest=7)
    _make_snapshots(config.snapshot_dir, 7)
    runner = _deleting_runner()

    outcome = RetentionPolicy(config, BtrfsTool(runner)).apply()

    assert outcome.intended == () and runner.called("btrfs", "subvolume", "delete") == []


def test_apply_orders_by_modification_time_not_name(tmp_path) -> None:
    """The oldest mtime should be deleted first even if its name sorts last."""
    config = _config(tmp_path, keep_latest=1)
    paths = _make_snapshots(config.snapshot_dir, 2)
    os.utime(paths[1], (1_600_000_000, 1_600_000_000))

    outcome = RetentionPolicy(config, BtrfsTool(_deleting_runner())).apply()

    assert outcome.deleted == (paths[1],)


def test_apply_continues_after_individual_failure(tmp_path) -> None:
    """One failed delete should not stop the remaining attempts."""
    config = _config(tmp_path, keep_latest=2)
    paths = _make_snapshots(config.snapshot_dir, 5)
    runner = _deleting_runner(fail_names={paths[1].name})

    outcome = RetentionPolicy(config, BtrfsTool(runner)).apply()

    assert len(runner.called("btrfs", "subvolume", "delete")) == 3
    assert outcome.deleted_count == 2 and outcome.failed == (paths[1],)
    assert outcome.partial


def test_apply_ignores_entries_without_prefix(tmp_path) -> None:
    """Foreign snapshots and plain files should never be touched."""
    config = _config(tmp_path, keep_latest=1)
    _make_snapshots(config.snapshot_dir, 2)
    _make_snapshots(config.snapshot_dir, 3, prefix="timeshift")
    (config.snapshot_dir / "boot_auto_snap_notes.txt").write_text("x", encoding="utf-8")

    outcome = RetentionPolicy(config, BtrfsTool(_deleting_runner())).apply()

    assert outcome.found_count == 2 and outcome.deleted_count == 1


def test_apply_honors_keep_override(tmp_path) -> None:
    """An explicit keep count should replace the configured one."""
    config = _config(tmp_path, keep_latest=7)
    _make_snapshots(config.snapshot_dir, 4)

    outcome = RetentionPolicy(config, BtrfsTool(_deleting_runner())).apply(keep_latest=1)

    assert outcome.deleted_count == 3


def test_apply_raises_for_missing_directory(tmp_path) -> None:
    """Retention should fail when the snapshot directory does not exist."""
    config = _config(tmp_path)

    with pytest.raises(SnapRetentionError):
        RetentionPolicy(config, BtrfsTool(FakeRunner())).apply()


def test_select_expired_returns_excess_oldest_entries() -> None:
    """Selection should take the head of an oldest-first list."""
    entries = [SnapshotEntry(name=f"s{i}", path=Path(f"/s{i}"), modified_at=float(i)) for i in range(5)]

    expired = select_expired(entries, keep_latest=3)

    assert [entry.name for entry in expired] == ["s0", "s1"]


def test_select_expired_with_zero_keep_selects_all() -> None:
    """A zero keep count should expire every entry."""
    entries = [SnapshotEntry(name="s0", path=Path("/s0"), modified_at=0.0)]

    assert select_expired(entries, keep_latest=0) == entries
