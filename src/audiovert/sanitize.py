"""Path segment sanitization for metadata-derived names."""

import re

from loguru import logger

log = logger.bind(stage="sanitize")

# Characters that are illegal (or awkward) on common filesystems.
_REPLACEMENTS = {
    "\\": "+",
    "/": "+",
    "<": "",
    ">": "",
    "?": "",
    "|": "",
    '"': "",
    "*": "-",
}

_UNSAFE_RE = re.compile(r'[\\/<>?|"*]')
_COLON_SPACE_RE = re.compile(r":\s")
_WHITESPACE_RE = re.compile(r"\s{2,}")


def sanitize_segment(segment: str) -> str:
    """Sanitize a single path component (not a full path).

    ``\\`` and ``/`` become ``+``, ``<>?|"`` are dropped, ``*`` becomes ``-``.
    A colon followed by whitespace becomes `` - ``, a bare colon ``-``.
    Runs of whitespace collapse to a single space. A segment made only of
    dots (or nothing) has its dots turned into ``-``.
    """
    sanitized = _UNSAFE_RE.sub(lambda m: _REPLACEMENTS[m.group(0)], segment)
    sanitized = _COLON_SPACE_RE.sub(" - ", sanitized)
    sanitized = sanitized.replace(":", "-")
    sanitized = _WHITESPACE_RE.sub(" ", sanitized)

    # "." and ".." would escape the destination root; "" is no name at all.
    if not sanitized.strip(" ."):
        sanitized = sanitized.strip().replace(".", "-") or "-"

    if sanitized != segment:
        log.debug(f"sanitize_segment: '{segment}' -> '{sanitized}'")
    return sanitized
