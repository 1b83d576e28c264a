"""Shell-style escaping for paths and commands shown to the user."""

import os
from pathlib import Path

_BASH_ESCAPES = {c: "\\" + c for c in " \"'\\$`&|;<>!()[]"}


def display_path(path: Path | str) -> str:
    """Render a path for display, escaping bytes that are not valid UTF-8."""
    return os.fsencode(path).decode("utf-8", errors="backslashreplace")


def escape(s: Path | str) -> str:
    """Escape a string so it can be pasted into bash as a single word."""
    return "".join(_BASH_ESCAPES.get(c, c) for c in display_path(s))


def format_command(args: list[str], replacements: dict[str, str] | None = None) -> str:
    """Join a command line for display, substituting placeholders for some arguments.

    Replacement values are shown verbatim (not escaped) so placeholders like
    ``<from>`` stay readable.
    """
    replacements = replacements or {}
    return " ".join(
        replacements[arg] if arg in replacements else escape(arg) for arg in args
    )
