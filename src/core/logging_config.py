"""Structured logging configuration.

This module initializes structlog with a stable JSON line format.
Events go to stderr so command output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_DEFAULT_LEVEL = logging.INFO


def configure_logging(verbose: bool = False) -> None:
    """Configure process-wide structlog rendering.

    Args:
        verbose: Emit debug-level events when true.
    """
    level = logging.DEBUG if verbose else _DEFAULT_LEVEL
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A lazy structlog proxy carrying the module name; it resolves the
        active configuration on each call, so module-level loggers honour
        a later ``configure_logging``.
    """
    return structlog.get_logger(name, logger=name)
