"""Discover stage -- walk inputs, open archives, register sources."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from loguru import logger

from ..archive import ArchiveKind
from ..config import AudiovertConfig
from ..errors import ArchiveError
from ..models import ArchiveSource, FileSource, Format, Source, Tasks, Unsupported
from ..registry import is_safe_entry

log = logger.bind(stage="discover")


def run(config: AudiovertConfig, tasks: Tasks) -> None:
    """Populate ``tasks.sources`` from every scan path.

    A directory is its own scan root; a single file's root is its parent.
    Walk order is sorted so repeated runs discover sources identically.
    """
    for path in config.scan_paths:
        if path.is_dir():
            _walk(config, tasks, path)
        elif path.is_file():
            _visit_file(config, tasks, path, root=path.parent)
        else:
            tasks.error(None, path, "no such file or directory")

    log.debug(
        f"discovered {len(tasks.sources)} sources, "
        f"{len(tasks.unsupported)} unsupported, {len(tasks.errors)} errors"
    )


def _walk(config: AudiovertConfig, tasks: Tasks, root: Path) -> None:
    def _on_error(exc: OSError) -> None:
        path = Path(exc.filename) if exc.filename else root
        tasks.error(None, path, f"reading directory: {exc.strerror or exc}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        for name in sorted(filenames):
            _visit_file(config, tasks, Path(dirpath) / name, root=root)


def _extension(name: str) -> str:
    return PurePosixPath(name.replace("\\", "/")).suffix.lstrip(".").lower()


def _classify(tasks: Tasks, source: Source, ext: str) -> None:
    fmt = Format.from_ext(ext)
    if fmt is None:
        tasks.unsupported.append(Unsupported(source=source, ext=ext))
        return
    tasks.sources.append((source, fmt))


def _visit_file(
    config: AudiovertConfig, tasks: Tasks, path: Path, root: Path,
) -> None:
    ext = _extension(path.name)

    # Partial files are reconciled by the planner, not treated as inputs.
    if not ext or ext == config.part_ext.lower():
        return

    kind = ArchiveKind.from_ext(ext)
    if kind is not None:
        _visit_archive(config, tasks, kind, path, root)
        return

    file_id = tasks.registry.push_file(path, root)
    _classify(tasks, FileSource(file_id), ext)


def _visit_archive(
    config: AudiovertConfig,
    tasks: Tasks,
    kind: ArchiveKind,
    path: Path,
    root: Path,
) -> None:
    archive_id = tasks.registry.push_archive(kind, path, root)
    names: list[str] = []

    try:
        kind.enumerate(path, names.append)
    except ArchiveError as exc:
        tasks.error(None, path, str(exc))
        return

    for name in names:
        if not is_safe_entry(name):
            tasks.error(None, path, f"refusing entry outside of archive: {name}")
            continue

        ext = _extension(name)
        if not ext or ext == config.part_ext.lower():
            continue

        _classify(tasks, ArchiveSource(archive_id=archive_id, path=name), ext)
