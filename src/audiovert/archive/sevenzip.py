"""7z archives via py7zr."""

import tempfile
from pathlib import Path
from typing import Callable

import py7zr
from loguru import logger
from py7zr.exceptions import ArchiveError as SevenZipError

from ..errors import ArchiveOpenError, ArchiveReadError

log = logger.bind(stage="archive")


def _open(path: Path) -> py7zr.SevenZipFile:
    try:
        return py7zr.SevenZipFile(path, mode="r")
    except (SevenZipError, OSError) as exc:
        raise ArchiveOpenError(f"opening archive {path}: {exc}") from exc


def enumerate(path: Path, visit: Callable[[str], None]) -> None:
    with _open(path) as archive:
        names = [info.filename for info in archive.list() if not info.is_directory]

    log.debug(f"7z {path.name}: {len(names)} entries")
    for name in names:
        visit(name)


def contents(path: Path, name: str) -> bytes | None:
    with _open(path) as archive:
        if name not in archive.getnames():
            return None
        # Solid blocks decode front to back, so extract the one target into a
        # scratch dir rather than holding every sibling entry in memory.
        with tempfile.TemporaryDirectory(prefix="audiovert-7z-") as tmp:
            try:
                archive.extract(path=tmp, targets=[name])
                return (Path(tmp) / name).read_bytes()
            except (SevenZipError, OSError) as exc:
                raise ArchiveReadError(f"reading {name} from {path}: {exc}") from exc
