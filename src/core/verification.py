"""Host verification: run checks, render them, and persist a JSON report.

Checks never modify the host. A failing check records its error message;
a check that does not apply to the active snapshot manager is skipped.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict
from pathlib import Path

from core.config import SnapConfig
from core.errors import SnapError
from core.logging_config import get_logger
from core.verification_checks import CheckRow, build_checks
from core.verification_types import (
    CheckSkipped,
    VerificationCheckResult,
    VerificationMode,
    VerificationOptions,
    VerificationReport,
    VerificationRuntime,
)
from provision.activation import select_snapshot_manager
from provision.host import Host

__all__ = [
    "VerificationCheckResult",
    "VerificationMode",
    "VerificationOptions",
    "VerificationReport",
    "run_verification",
    "render_verification_report",
    "save_verification_report",
]

_LOGGER = get_logger(__name__)


def run_verification(
    config: SnapConfig,
    host: Host,
    options: VerificationOptions,
) -> VerificationReport:
    """Check the host against the configured snapshot setup.

    Args:
        config: Runtime configuration describing the expected setup.
        host: Host adapters used for read-only queries.
        options: Mode and fail-fast selection.

    Returns:
        Report with one row per executed check.
    """
    manager = select_snapshot_manager(config, host.packages)
    runtime = VerificationRuntime(config=config, host=host, manager=manager)
    results: list[VerificationCheckResult] = []
    for row in build_checks(options.mode):
        result = _run_check(row, runtime)
        results.append(result)
        if result.status == "failed" and options.fail_fast:
            _LOGGER.info("verification_stopped_early", check_id=result.check_id)
            break
    report = VerificationReport(
        mode=options.mode,
        manager=manager.value,
        snapshot_dir=str(config.snapshot_dir),
        checks=tuple(results),
    )
    _LOGGER.info(
        "verification_finished",
        manager=report.manager,
        passed=report.passed_count,
        failed=report.failed_count,
        skipped=report.skipped_count,
    )
    return report


def _run_check(row: CheckRow, runtime: VerificationRuntime) -> VerificationCheckResult:
    check_id, title, check_fn = row
    started_at = time.monotonic()
    try:
        status, details = "passed", check_fn(runtime)
    except CheckSkipped as skip:
        status, details = "skipped", str(skip)
    except (SnapError, OSError) as error:
        status, details = "failed", str(error)
        _LOGGER.warning("verification_check_failed", check_id=check_id, error=details)
    return VerificationCheckResult(
        check_id=check_id,
        title=title,
        status=status,
        details=details,
        duration_seconds=round(time.monotonic() - started_at, 3),
    )


def render_verification_report(report: VerificationReport) -> str:
    """Render report into stable multi-line text for CLI output."""
    lines = [
        f"mode={report.mode}",
        f"manager={report.manager}",
        f"snapshot_dir={report.snapshot_dir}",
    ]
    lines.extend(
        f"[{row.status.upper()}] {row.check_id} {row.title} "
        f"({row.duration_seconds:.3f}s) :: {row.details}"
        for row in report.checks
    )
    lines.append(f"passed={report.passed_count}")
    lines.append(f"failed={report.failed_count}")
    lines.append(f"skipped={report.skipped_count}")
    return "\n".join(lines)


def save_verification_report(report: VerificationReport, report_path: Path) -> Path:
    """Write the report as JSON, creating parent directories."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps(asdict(report), indent=2) + "\n", encoding="utf-8")
    return report_path
