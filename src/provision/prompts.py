"""Interactive confirmation prompts."""

from __future__ import annotations

from typing import Callable

_AFFIRMATIVE = frozenset({"y", "yes"})


def confirm_action(prompt: str, input_fn: Callable[[str], str] = input) -> bool:
    """Ask a ``[y/N]`` question; anything but yes declines.

    Args:
        prompt: Question text.
        input_fn: Line reader, ``input`` by default.

    Returns:
        True only for an explicit ``y`` or ``yes`` answer.
    """
    try:
        response = input_fn(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return response.strip().lower() in _AFFIRMATIVE
