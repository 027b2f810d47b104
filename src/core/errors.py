"""btrsnap exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SnapError(Exception):
    """Base exception for all btrsnap failures."""


class SnapConfigError(SnapError):
    """Raised for invalid runtime configuration."""


class SnapPreflightError(SnapError):
    """Raised when a required host precondition is not met."""


class SnapCommandError(SnapError):
    """Raised when an external command cannot be executed."""


class SnapCreationError(SnapError):
    """Raised for snapshot creation failures."""


class SnapRetentionError(SnapError):
    """Raised when retention cannot inspect the snapshot directory."""


class SnapProvisionError(SnapError):
    """Raised for unrecoverable setup workflow failures."""


class SnapBusyError(SnapError):
    """Raised when another process holds the snapshot directory lock."""


class SnapVerificationError(SnapError):
    """Raised when a verification check fails."""
