"""Module entry point for ``python -m cli``.

Generated helper scripts fall back to this when no btrsnap executable is on PATH.
"""

from __future__ import annotations

from cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
