"""Line-oriented prompting utilities for the ct-tools CLIs."""

import builtins
import sys
from typing import Callable, Optional


def is_interactive() -> bool:
    """Return True when prompts can safely read from stdin."""
    # If input() has been monkeypatched (e.g. during tests), assume interactivity.
    if input is not builtins.input:  # type: ignore[name-defined]
        return True

    stdin = getattr(sys, "stdin", None)
    if stdin is None:
        return False

    try:
        return stdin.isatty()
    except (AttributeError, ValueError):
        return False


def prompt(message: str, default: Optional[str] = None) -> str:
    """
    Read one line of input, showing ``[default]`` when there is one.

    Blank input and end-of-file both yield the default (or "").
    """
    display_default = f" [{default}]" if default else ""
    try:
        answer = input(f"{message}{display_default}: ").strip()
    except EOFError:
        print()
        return default or ""
    return answer or default or ""


def confirm(message: str, expected: str = "yes", case_sensitive: bool = False,
            ask: Optional[Callable[..., str]] = None) -> bool:
    """
    Ask the user to type ``expected`` to go ahead.

    Anything else, including blank input or end-of-file, declines.
    """
    answer = (ask or prompt)(message).strip()
    if case_sensitive:
        return answer == expected
    return answer.lower() == expected.lower()
