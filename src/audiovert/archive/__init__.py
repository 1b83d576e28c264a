"""Archive adapters -- one enumerate/contents capability per archive format.

Formats:
    zip -- stdlib zipfile
    rar -- rarfile (needs an unrar/unar/bsdtar backend for compressed entries)
    7z  -- py7zr

The format is picked once from the file extension; callers only ever see
``ArchiveKind`` and entry names as strings.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Callable

from . import rar, sevenzip, zip


class ArchiveKind(StrEnum):
    ZIP = "zip"
    RAR = "rar"
    SEVEN_ZIP = "7z"

    @classmethod
    def from_ext(cls, ext: str) -> ArchiveKind | None:
        try:
            return cls(ext.lower().lstrip("."))
        except ValueError:
            return None

    def enumerate(self, path: Path, visit: Callable[[str], None]) -> None:
        """Stream every file entry name in the archive to ``visit``.

        Raises ArchiveOpenError if the archive cannot be parsed. Exceptions
        raised by ``visit`` propagate unchanged and stop the enumeration.
        """
        _BACKENDS[self].enumerate(path, visit)

    def contents(self, path: Path, name: str) -> bytes | None:
        """Read one entry. Returns None if no entry has that name."""
        return _BACKENDS[self].contents(path, name)


_BACKENDS = {
    ArchiveKind.ZIP: zip,
    ArchiveKind.RAR: rar,
    ArchiveKind.SEVEN_ZIP: sevenzip,
}
