"""Zip archives via the standard library."""

import zipfile
import zlib
from pathlib import Path
from typing import Callable

from loguru import logger

from ..errors import ArchiveOpenError, ArchiveReadError

log = logger.bind(stage="archive")


def _open(path: Path) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(path, "r")
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveOpenError(f"opening archive {path}: {exc}") from exc


def enumerate(path: Path, visit: Callable[[str], None]) -> None:
    with _open(path) as zf:
        names = [info.filename for info in zf.infolist() if not info.is_dir()]

    log.debug(f"zip {path.name}: {len(names)} entries")
    for name in names:
        visit(name)


def contents(path: Path, name: str) -> bytes | None:
    with _open(path) as zf:
        try:
            info = zf.getinfo(name)
        except KeyError:
            return None
        try:
            return zf.read(info)
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, OSError) as exc:
            raise ArchiveReadError(f"reading {name} from {path}: {exc}") from exc
