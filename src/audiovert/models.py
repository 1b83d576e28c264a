"""Core enums, source variants, and task types.

Enums:
    Format        -- Supported audio formats, in the order target sets are sorted.
    TransferKind  -- How a same-format task moves bytes (copy, link, move).

Sources:
    FileSource    -- A plain file, by FileId into the registry.
    ArchiveSource -- An entry inside an archive, by ArchiveId and entry name.

Tasks:
    Convert / Transfer -- The two TaskKind variants.
    Task               -- One planned unit of work with its completion state.
    Tasks              -- The plan: tasks plus every diagnostic gathered
                          while building it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, NewType

if TYPE_CHECKING:
    from .registry import SourceRegistry

FileId = NewType("FileId", int)
ArchiveId = NewType("ArchiveId", int)


class Format(StrEnum):
    AAC = "aac"
    FLAC = "flac"
    MP3 = "mp3"
    OGG = "ogg"
    WAV = "wav"

    @property
    def ext(self) -> str:
        return self.value

    @property
    def container(self) -> str:
        """The ffmpeg muxer name passed to ``-f``."""
        if self is Format.AAC:
            return "adts"
        return self.value

    @property
    def is_lossless(self) -> bool:
        return self in (Format.FLAC, Format.WAV)

    @property
    def default_bitrate(self) -> int | None:
        return DEFAULT_BITRATES.get(self)

    @property
    def order(self) -> int:
        return _FORMAT_ORDER[self]

    @classmethod
    def from_ext(cls, ext: str) -> Format | None:
        try:
            return cls(ext.lower().lstrip("."))
        except ValueError:
            return None


_FORMAT_ORDER: dict[Format, int] = {f: n for n, f in enumerate(Format)}

DEFAULT_BITRATES: dict[Format, int] = {
    Format.AAC: 192,
    Format.MP3: 320,
    Format.OGG: 192,
}


class TransferKind(StrEnum):
    COPY = "copy"
    LINK = "link"
    MOVE = "move"

    @property
    def symbolic_command(self) -> str:
        return {"copy": "cp", "link": "ln", "move": "mv"}[self.value]


# -- Sources --


@dataclass(frozen=True)
class FileSource:
    file_id: FileId


@dataclass(frozen=True)
class ArchiveSource:
    archive_id: ArchiveId
    path: str


Source = FileSource | ArchiveSource


# -- Tasks --


@dataclass
class Convert:
    part_path: Path
    from_: Format
    to: Format
    converted: bool = False

    @property
    def is_completed(self) -> bool:
        return self.converted

    def __str__(self) -> str:
        return f"converting {self.from_} to {self.to}"


@dataclass
class Transfer:
    kind: TransferKind

    @property
    def is_completed(self) -> bool:
        # A transfer has no partial state, only the ``moved`` flag on the task.
        return True

    def __str__(self) -> str:
        return {
            TransferKind.COPY: "copying",
            TransferKind.LINK: "link",
            TransferKind.MOVE: "move",
        }[self.kind]


TaskKind = Convert | Transfer


@dataclass
class Task:
    index: int
    source: Source
    to_path: Path
    kind: TaskKind
    moved: bool = False
    pre_remove: list[tuple[str, Path]] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.kind.is_completed and self.moved and not self.pre_remove


# -- Diagnostics gathered while planning --


@dataclass
class PathError:
    """Errors attributed to one source, or to a bare path during discovery."""

    source: Source | None
    path: Path
    messages: list[str] = field(default_factory=list)


@dataclass
class Exists:
    source: Source
    path: Path


@dataclass
class Unsupported:
    source: Source
    ext: str


@dataclass
class MatchingConversion:
    source: Source
    from_: Format
    to_formats: list[Format]


@dataclass
class MetaDump:
    source: Source
    items: list[tuple[str, str]]


@dataclass
class Tasks:
    registry: SourceRegistry
    tasks: list[Task] = field(default_factory=list)
    errors: list[PathError] = field(default_factory=list)
    already_exists: list[Exists] = field(default_factory=list)
    unsupported: list[Unsupported] = field(default_factory=list)
    matching_conversions: list[MatchingConversion] = field(default_factory=list)
    meta_dumps: list[MetaDump] = field(default_factory=list)
    # Discovered sources in walk order, with their formats.
    sources: list[tuple[Source, Format]] = field(default_factory=list)

    def error(self, source: Source | None, path: Path, message: str) -> None:
        """Attribute an error to a source (or path), merging repeats."""
        for e in self.errors:
            if e.source == source and e.path == path:
                e.messages.append(message)
                return
        self.errors.append(PathError(source=source, path=path, messages=[message]))
