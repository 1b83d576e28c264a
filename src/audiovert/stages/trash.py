"""Trash stage -- relocate fully converted source files (--trash-source)."""

from __future__ import annotations

import shutil
from pathlib import Path

from loguru import logger

from ..config import AudiovertConfig
from ..models import FileSource, Tasks, Transfer, TransferKind
from ..ops.transfer import remove_empty_parents
from ..output import Out
from ..registry import FileEntry

log = logger.bind(stage="trash")


def trash_candidates(tasks: Tasks) -> list[FileEntry]:
    """Plain-file sources whose every task completed.

    Sources with a Move task are excluded: the file is already gone.
    Archive entries are never trashed.
    """
    by_source: dict[FileSource, bool] = {}

    for task in tasks.tasks:
        if not isinstance(task.source, FileSource):
            continue
        moved_away = isinstance(task.kind, Transfer) and task.kind.kind is TransferKind.MOVE
        ok = task.is_completed and not moved_away
        by_source[task.source] = by_source.get(task.source, True) and ok

    return [tasks.registry.file(s.file_id) for s, ok in by_source.items() if ok]


def unique_name(trash: Path, name: str, reserved: set[str]) -> Path:
    """``trash/name``, or ``trash/stem (n).ext`` if that is taken."""
    candidate = name
    stem, dot, suffix = name.rpartition(".")
    if not stem:
        stem, dot, suffix = name, "", ""

    n = 1
    while candidate in reserved or (trash / candidate).exists():
        candidate = f"{stem} ({n}){dot}{suffix}"
        n += 1

    reserved.add(candidate)
    return trash / candidate


def run(o: Out, config: AudiovertConfig, tasks: Tasks) -> None:
    if not config.trash_source:
        return

    entries = trash_candidates(tasks)
    if not entries:
        return

    trash = config.trash_dir()

    if not trash.is_dir():
        o.info("Creating trash directory")
        with o.indent():
            o.path("path:", trash)
            if not config.dry_run:
                try:
                    trash.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    o.error(exc)
                    return

    reserved: set[str] = set()
    failed: list[FileEntry] = []

    for entry in entries:
        dest = unique_name(trash, entry.path.name, reserved)

        o.info("Trashing source file")
        with o.indent():
            o.path("from:", entry.path)
            o.path("to:", dest)

            if config.dry_run:
                continue

            try:
                shutil.move(str(entry.absolute), str(dest))
            except OSError as exc:
                o.error(exc)
                failed.append(entry)
                continue

        log.debug(f"trashed {entry.path} -> {dest}")

    for entry in failed:
        remove_empty_parents(o, entry.path.parent, stop_at=entry.root)
