"""Indentation-aware, colorized progress output.

User-facing progress goes through ``Out``; diagnostics go through loguru.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

import click

from .models import ArchiveSource, FileSource, Source
from .registry import SourceRegistry
from .shell import display_path

_STYLES = {
    "info": {"fg": "green", "bold": True},
    "warn": {"fg": "yellow", "bold": True},
    "error": {"fg": "red", "bold": True},
}


class Out:
    """Line writer with a scoped indentation level.

    ``color=None`` lets click decide (ANSI codes are stripped when the stream
    is not a terminal).
    """

    def __init__(self, stream: IO[str] | None = None, color: bool | None = None) -> None:
        self.stream = stream
        self.color = color
        self.level = 0

    @contextmanager
    def indent(self, n: int = 1) -> Iterator[Out]:
        self.level += n
        try:
            yield self
        finally:
            self.level -= n

    def blank(self, message: object) -> None:
        self._write(str(message))

    def info(self, message: object) -> None:
        self._write(str(message), "info")

    def warn(self, message: object) -> None:
        self._write(str(message), "warn")

    def error(self, message: object) -> None:
        self._write(str(message), "error")

    def _write(self, message: str, style: str | None = None) -> None:
        if style is not None:
            message = click.style(message, **_STYLES[style])
        click.echo("  " * self.level + message, file=self.stream, color=self.color)

    def source(self, registry: SourceRegistry, source: Source) -> None:
        """Show where a source comes from (the archive too, for archive entries)."""
        match source:
            case FileSource(file_id=file_id):
                self.blank(f"from: {display_path(registry.file(file_id).path)}")
            case ArchiveSource(archive_id=archive_id, path=name):
                self.blank(f"archive: {display_path(registry.archive(archive_id).path)}")
                self.blank(f"from: {name}")

    def path(self, label: str, path: Path) -> None:
        self.blank(f"{label} {display_path(path)}")
