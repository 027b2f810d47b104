"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def pytest_sessionstart() -> None:
    """Add src and the project root to sys.path for test imports."""
    for path in (_PROJECT_ROOT / "src", _PROJECT_ROOT):
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))


@pytest.fixture(autouse=True)
def _structured_logging() -> None:
    """Route structlog events to stderr so stdout assertions stay clean."""
    from core.logging_config import configure_logging

    configure_logging(verbose=False)
