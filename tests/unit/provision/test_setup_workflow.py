"""Unit tests for the end-to-end setup workflow."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.config import SnapConfig
from core.errors import SnapPreflightError
from core.types import SnapshotManagerKind
from provision.host import Host, build_host
from provision.setup_workflow import render_next_steps, run_setup
from tests.fakes import FakeRunner, btrfs_runner, fail, ok

_INSTALLED_UNITS = {
    "btrfs-boot-snapshot.service",
    "btrfs-snapshot-cleanup.service",
    "btrfs-snapshot-cleanup.timer",
    "grub-btrfsd.path",
}


def _config(tmp_path) -> SnapConfig:
    return replace(
        SnapConfig(),
        snapshot_dir=tmp_path / "snapshots",
        creation_script_path=tmp_path / "bin" / "create-btrfs-boot-snapshot",
        cleanup_script_path=tmp_path / "bin" / "manage-btrfs-snapshots",
        unit_dir=tmp_path / "units",
        grub_btrfs_config_path=tmp_path / "grub-btrfs" / "config",
        grub_cfg_path=tmp_path / "grub" / "grub.cfg",
        lock_path=tmp_path / "btrsnap.lock",
    )


def _list_units(argv: tuple[str, ...]):
    name = argv[-1]
    return ok(f"{name} disabled disabled\n" if name in _INSTALLED_UNITS else "")


def _runner(*commands: str) -> FakeRunner:
    runner = btrfs_runner()
    runner.commands.update({"grub-mkconfig", "grub-btrfs", *commands})
    runner.on(("systemctl", "list-unit-files"), _list_units)
    runner.on(("systemctl", "is-enabled"), fail())
    runner.on(("systemctl", "is-active"), fail())
    return runner


def _host(runner: FakeRunner, answer: bool = True) -> Host:
    host = build_host(runner, confirm=lambda prompt: answer)
    host.environ = {"SUDO_USER": "alice"}
    return host


@pytest.fixture
def as_root(monkeypatch) -> None:
    monkeypatch.setattr("provision.preflight.is_root", lambda: True)


def test_setup_enables_builtin_automation_without_timeshift(tmp_path, as_root) -> None:
    """Without Timeshift the boot service and cleanup timer are enabled."""
    config = _config(tmp_path)
    runner = _runner()

    report = run_setup(config, _host(runner), ["/usr/bin/btrsnap"], grub_dir=tmp_path)

    enabled = [call.args[-1] for call in runner.called("systemctl", "enable")]
    assert report is not None and report.manager is SnapshotManagerKind.CUSTOM
    assert enabled == [
        "btrfs-boot-snapshot.service",
        "btrfs-snapshot-cleanup.timer",
        "grub-btrfsd.path",
    ]
    assert config.creation_script_path.exists() and config.cleanup_timer_path.exists()
    assert report.grub_regenerated and report.warnings == []


def test_setup_defers_to_timeshift_when_installed(tmp_path, as_root) -> None:
    """With Timeshift present the built-in units are disabled."""
    config = _config(tmp_path)
    runner = _runner("timeshift")

    report = run_setup(config, _host(runner), ["/usr/bin/btrsnap"], grub_dir=tmp_path)

    disabled = [call.args[-1] for call in runner.called("systemctl", "disable")]
    assert report is not None and report.manager is SnapshotManagerKind.TIMESHIFT
    assert disabled == ["btrfs-boot-snapshot.service", "btrfs-snapshot-cleanup.timer"]


def test_setup_returns_none_when_user_declines(tmp_path, as_root) -> None:
    """Declining the confirmation should stop before any change."""
    config = _config(tmp_path)
    runner = _runner()

    report = run_setup(config, _host(runner, answer=False), grub_dir=tmp_path)

    assert report is None and runner.called("pacman") == []


def test_setup_requires_btrfs_root(tmp_path, as_root) -> None:
    """A non-Btrfs root filesystem should abort setup."""
    runner = btrfs_runner("/")
    runner.commands.add("grub-mkconfig")

    with pytest.raises(SnapPreflightError, match="Btrfs"):
        run_setup(_config(tmp_path), _host(runner), grub_dir=tmp_path)


def test_setup_requires_sudo_user(tmp_path, as_root) -> None:
    """Running from a root shell without SUDO_USER should abort."""
    host = _host(_runner())
    host.environ = {"SUDO_USER": "root"}

    with pytest.raises(SnapPreflightError, match="non-root user"):
        run_setup(_config(tmp_path), host, grub_dir=tmp_path)


def test_setup_requires_root(tmp_path, monkeypatch) -> None:
    """Setup should refuse to run unprivileged."""
    monkeypatch.setattr("provision.preflight.is_root", lambda: False)

    with pytest.raises(SnapPreflightError, match="root"):
        run_setup(_config(tmp_path), _host(_runner()), grub_dir=tmp_path)


def test_setup_continues_when_grub_regeneration_fails(tmp_path, as_root) -> None:
    """grub-mkconfig failure should be a warning, not an abort."""
    runner = _runner().on(("grub-mkconfig",), fail())
    config = _config(tmp_path)

    report = run_setup(config, _host(runner), ["/usr/bin/btrsnap"], grub_dir=tmp_path)

    assert report is not None and not report.grub_regenerated
    assert any("grub-mkconfig" in warning for warning in report.warnings)


def test_setup_is_repeatable(tmp_path, as_root) -> None:
    """A second run over a configured host should succeed unchanged."""
    config = _config(tmp_path)
    run_setup(config, _host(_runner()), ["/usr/bin/btrsnap"], grub_dir=tmp_path)
    first_config = config.grub_btrfs_config_path.read_text(encoding="utf-8")

    report = run_setup(config, _host(_runner()), ["/usr/bin/btrsnap"], grub_dir=tmp_path)

    assert report is not None
    assert config.grub_btrfs_config_path.read_text(encoding="utf-8") == first_config


def test_next_steps_mention_snapshot_dir(tmp_path, as_root) -> None:
    """Guidance should point at the configured snapshot directory."""
    config = _config(tmp_path)
    report = run_setup(config, _host(_runner()), ["/usr/bin/btrsnap"], grub_dir=tmp_path)

    lines = render_next_steps(config, report)

    assert any(str(config.snapshot_dir) in line for line in lines)
