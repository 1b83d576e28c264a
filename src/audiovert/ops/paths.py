"""Destination path planning.

Three layouts, picked by which inputs are present:

    parts given     <to_dir or root>/Artist/Artist - Album (Year)/.../name.ext
    to_dir only     <to_dir>/<path relative to its scan root>, extension swapped
    neither         <path> with its extension swapped, in place
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import PlanningError
from ..models import Format

if TYPE_CHECKING:
    from ..meta import Parts

log = logger.bind(stage="paths")


def swap_extension(path: Path, fmt: Format) -> Path:
    """Replace the extension with ``fmt``'s, keeping one that already matches in any case."""
    if path.suffix.lower() == f".{fmt.ext}":
        return path
    return path.with_suffix(f".{fmt.ext}")


def append_extension(path: Path, ext: str) -> Path:
    """Append ``.ext`` to the final component without touching existing dots."""
    return path.with_name(f"{path.name}.{ext}")


def plan_destination(
    path: Path,
    root: Path,
    to: Format,
    to_dir: Path | None = None,
    parts: Parts | None = None,
) -> Path:
    """Compute where ``path`` lands when written as ``to``.

    Raises PlanningError when ``path`` is not under ``root`` and the layout
    needs the relative suffix.
    """
    if parts is not None:
        base = to_dir if to_dir is not None else root
        dest = append_extension(base.joinpath(*parts.segments()), to.ext)
        log.debug(f"plan_destination(meta): {path} -> {dest}")
        return dest

    if to_dir is not None:
        try:
            suffix = path.relative_to(root)
        except ValueError:
            raise PlanningError(f"{path} is not inside scan root {root}") from None
        dest = swap_extension(to_dir / suffix, to)
        log.debug(f"plan_destination(mirror): {path} -> {dest}")
        return dest

    return swap_extension(path, to)


def part_path(dest: Path, part_ext: str) -> Path:
    """Partial output path used while a conversion is in flight."""
    return append_extension(dest, part_ext)


def same_path(a: Path, b: Path) -> bool:
    """True if both paths name the same location (lexically, after absolutizing)."""
    return os.path.abspath(a) == os.path.abspath(b)
