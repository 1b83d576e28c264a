"""Filesystem primitives used by the executor and the trash pass.

Every mutating helper here takes ``dry_run`` and reports what it does
through the Out sink before doing it.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from loguru import logger

from ..models import TransferKind
from ..output import Out
from ..shell import escape

log = logger.bind(stage="transfer")


def make_dir(o: Out, what: str, path: Path, dry_run: bool = False) -> bool:
    """Make sure the parent directory of ``path`` exists.

    Returns False (after reporting) if it could not be created.
    """
    parent = path.parent
    if parent.is_dir():
        return True

    o.info(f"making {what} dir")
    with o.indent():
        o.blank(f"mkdir -p {escape(parent)}")

        if dry_run:
            return True

        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            o.error(exc)
            return False

    return True


def transfer_file(kind: TransferKind, source: Path, dest: Path) -> None:
    """Link, move, or copy a plain file. Raises OSError on failure."""
    log.debug(f"{kind.symbolic_command} {source} -> {dest}")
    if kind is TransferKind.LINK:
        os.link(source, dest)
    elif kind is TransferKind.MOVE:
        shutil.move(str(source), str(dest))
    else:
        shutil.copyfile(source, dest)


def write_bytes_atomic(data: bytes, dest: Path, part_ext: str) -> None:
    """Write ``data`` to ``dest`` through a ``<dest>.<part_ext>`` file.

    The destination only ever appears complete. Raises OSError on failure.
    """
    part = dest.with_name(f"{dest.name}.{part_ext}")
    try:
        part.write_bytes(data)
        part.replace(dest)
    except OSError:
        part.unlink(missing_ok=True)
        raise


def is_empty_dir(path: Path) -> bool:
    try:
        return path.is_dir() and not any(path.iterdir())
    except OSError:
        return False


def remove_empty_parents(
    o: Out, directory: Path, stop_at: Path | None = None, dry_run: bool = False,
) -> None:
    """Remove ``directory`` if empty, then each parent that becomes empty.

    Stops at the first non-empty or missing directory, or at ``stop_at``
    (which is never removed).
    """
    current = directory
    stop = os.path.abspath(stop_at) if stop_at is not None else None

    while current != current.parent and os.path.abspath(current) != stop:
        if not is_empty_dir(current):
            break

        o.info("removing empty directory:")
        with o.indent():
            o.path("path:", current)

            if dry_run:
                break

            try:
                current.rmdir()
            except OSError as exc:
                o.error(exc)
                break

        log.debug(f"Removed empty dir: {current}")
        current = current.parent
