"""Process privilege inspection."""

from __future__ import annotations

import os
from typing import Mapping


def is_root() -> bool:
    """Whether the current process runs with effective uid 0."""
    return os.geteuid() == 0


def invoking_user(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the non-root user that invoked sudo, if any."""
    env = os.environ if environ is None else environ
    user = env.get("SUDO_USER", "").strip()
    if not user or user == "root":
        return None
    return user
