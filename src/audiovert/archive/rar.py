"""Rar archives via rarfile."""

from pathlib import Path
from typing import Callable

import rarfile
from loguru import logger

from ..errors import ArchiveOpenError, ArchiveReadError

log = logger.bind(stage="archive")


def _open(path: Path) -> rarfile.RarFile:
    try:
        return rarfile.RarFile(path)
    except (rarfile.Error, OSError) as exc:
        raise ArchiveOpenError(f"opening archive {path}: {exc}") from exc


def enumerate(path: Path, visit: Callable[[str], None]) -> None:
    with _open(path) as rf:
        names = [info.filename for info in rf.infolist() if not info.is_dir()]

    log.debug(f"rar {path.name}: {len(names)} entries")
    for name in names:
        visit(name)


def contents(path: Path, name: str) -> bytes | None:
    with _open(path) as rf:
        try:
            info = rf.getinfo(name)
        except rarfile.NoRarEntry:
            return None
        try:
            return rf.read(info)
        except (rarfile.Error, OSError) as exc:
            raise ArchiveReadError(f"reading {name} from {path}: {exc}") from exc
