"""Unit tests for root device discovery."""

from __future__ import annotations

from system.devices import identify_root_device
from tests.fakes import FakeRunner, fail, ok


def test_identify_root_device_reads_subvolume_and_parent() -> None:
    """Mount source, subvol option, and parent disk should be resolved."""
    runner = (
        FakeRunner()
        .on(("findmnt", "-n", "-o", "SOURCE"), ok("/dev/nvme0n1p2[/@]\n"))
        .on(("findmnt", "-n", "-o", "OPTIONS"), ok("rw,noatime,compress=zstd,subvol=/@\n"))
        .on(("lsblk",), ok("nvme0n1\n"))
    )

    info = identify_root_device(runner)

    assert info is not None
    assert (info.subvolume, info.block_device) == ("/@", "nvme0n1")
    assert runner.called("lsblk")[0].args[-1] == "/dev/nvme0n1p2"


def test_identify_root_device_falls_back_to_device_name() -> None:
    """Without lsblk output the partition number should be stripped."""
    runner = (
        FakeRunner()
        .on(("findmnt", "-n", "-o", "SOURCE"), ok("/dev/sda2\n"))
        .on(("findmnt", "-n", "-o", "OPTIONS"), ok("rw\n"))
        .on(("lsblk",), fail())
    )

    info = identify_root_device(runner)

    assert info is not None and info.block_device == "sda" and info.subvolume is None


def test_identify_root_device_none_without_source() -> None:
    """An unresolvable mount should yield None."""
    runner = FakeRunner().on(("findmnt",), fail())

    assert identify_root_device(runner) is None
