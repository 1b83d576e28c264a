"""Source registry -- owns every discovered path behind small integer handles.

Files and archives are pushed once during discovery and referenced by
FileId/ArchiveId everywhere else. Paths are canonicalized on insertion so
links and renames later in the run use stable absolute references.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from loguru import logger

from .archive import ArchiveKind
from .errors import ArchiveReadError, InvalidId
from .models import ArchiveId, ArchiveSource, FileId, FileSource, Source

log = logger.bind(stage="registry")


@dataclass(frozen=True)
class FileEntry:
    path: Path
    absolute: Path
    root: Path


@dataclass(frozen=True)
class ArchiveEntry:
    kind: ArchiveKind
    path: Path
    absolute: Path
    root: Path

    @property
    def virtual_dir(self) -> Path:
        """Directory the archive's contents appear under (``music.zip`` -> ``music``)."""
        return self.path.with_suffix("")


class SourceRegistry:
    def __init__(self) -> None:
        self._files: list[FileEntry] = []
        self._archives: list[ArchiveEntry] = []

    def push_file(self, path: Path, root: Path) -> FileId:
        entry = FileEntry(path=path, absolute=path.resolve(), root=root)
        self._files.append(entry)
        return FileId(len(self._files) - 1)

    def push_archive(self, kind: ArchiveKind, path: Path, root: Path) -> ArchiveId:
        entry = ArchiveEntry(kind=kind, path=path, absolute=path.resolve(), root=root)
        self._archives.append(entry)
        log.debug(f"registered {kind} archive #{len(self._archives) - 1}: {path}")
        return ArchiveId(len(self._archives) - 1)

    def file(self, file_id: FileId) -> FileEntry:
        if not 0 <= file_id < len(self._files):
            raise InvalidId(f"invalid file id: {file_id}")
        return self._files[file_id]

    def archive(self, archive_id: ArchiveId) -> ArchiveEntry:
        if not 0 <= archive_id < len(self._archives):
            raise InvalidId(f"invalid archive id: {archive_id}")
        return self._archives[archive_id]

    def resolve(self, source: Source) -> FileEntry | ArchiveEntry:
        match source:
            case FileSource(file_id=file_id):
                return self.file(file_id)
            case ArchiveSource(archive_id=archive_id):
                return self.archive(archive_id)
        raise InvalidId(f"unknown source: {source!r}")

    def path(self, source: Source) -> Path:
        """Path used for display and planning.

        Archive entries get a virtual path: the archive path without its
        extension, joined with the entry name.
        """
        match source:
            case FileSource(file_id=file_id):
                return self.file(file_id).path
            case ArchiveSource(archive_id=archive_id, path=name):
                entry = self.archive(archive_id)
                return entry.virtual_dir.joinpath(*entry_parts(name))
        raise InvalidId(f"unknown source: {source!r}")

    def root(self, source: Source) -> Path:
        return self.resolve(source).root

    def contents(self, source: ArchiveSource) -> bytes:
        entry = self.archive(source.archive_id)
        data = entry.kind.contents(entry.path, source.path)
        if data is None:
            raise ArchiveReadError(f"missing entry {source.path} in {entry.path}")
        return data


def entry_parts(name: str) -> tuple[str, ...]:
    """Split an archive entry name into path components ('\\' counts as a separator)."""
    return PurePosixPath(name.replace("\\", "/")).parts


def is_safe_entry(name: str) -> bool:
    """Reject entries that would escape the archive's virtual directory."""
    parts = entry_parts(name)
    if not parts or parts[0] == "/":
        return False
    return ".." not in parts
