"""Unit tests for verify CLI command wiring."""

from __future__ import annotations

from cli.main import main
from core.verification import VerificationCheckResult, VerificationReport


def _build_report(failed_count: int) -> VerificationReport:
    status = "failed" if failed_count > 0 else "passed"
    return VerificationReport(
        mode="quick",
        manager="custom",
        snapshot_dir="/.snapshots",
        checks=(
            VerificationCheckResult(
                check_id="V001",
                title="check",
                status=status,
                details="ok",
                duration_seconds=0.01,
            ),
        ),
    )


def test_cli_verify_returns_zero_when_all_checks_pass(monkeypatch, capsys, tmp_path) -> None:
    """Verify command should exit zero on fully passing report."""
    monkeypatch.setattr(
        "cli.verify_command.run_verification",
        lambda config, host, options: _build_report(failed_count=0),
    )
    report_path = tmp_path / "report.json"

    exit_code = main(["verify", "--report", str(report_path)])
    output = capsys.readouterr().out

    assert exit_code == 0 and "report_path=" in output and report_path.exists()


def test_cli_verify_returns_one_when_any_check_fails(monkeypatch, capsys) -> None:
    """Verify command should exit one when report has failed checks."""
    monkeypatch.setattr(
        "cli.verify_command.run_verification",
        lambda config, host, options: _build_report(failed_count=1),
    )

    exit_code = main(["verify"])
    output = capsys.readouterr().out

    assert exit_code == 1 and "[FAILED] V001" in output
