"""Tests for registry.py -- source handles and virtual archive paths."""

import zipfile
from pathlib import Path

import pytest

from audiovert.archive import ArchiveKind
from audiovert.errors import ArchiveReadError, InvalidId
from audiovert.models import ArchiveId, ArchiveSource, FileId, FileSource
from audiovert.registry import SourceRegistry, entry_parts, is_safe_entry


class TestSourceRegistry:
    def test_push_file(self, tmp_path):
        f = tmp_path / "a.flac"
        f.write_bytes(b"x")
        registry = SourceRegistry()

        file_id = registry.push_file(f, tmp_path)

        assert file_id == 0
        entry = registry.file(file_id)
        assert entry.path == f
        assert entry.absolute == f.resolve()
        assert entry.root == tmp_path
        assert registry.path(FileSource(file_id)) == f
        assert registry.root(FileSource(file_id)) == tmp_path

    def test_ids_are_dense(self, tmp_path):
        registry = SourceRegistry()
        ids = [registry.push_file(tmp_path / f"{n}.mp3", tmp_path) for n in range(3)]
        assert ids == [0, 1, 2]

    def test_invalid_ids(self):
        registry = SourceRegistry()
        with pytest.raises(InvalidId):
            registry.file(FileId(0))
        with pytest.raises(InvalidId):
            registry.archive(ArchiveId(3))

    def test_archive_virtual_path(self, tmp_path):
        registry = SourceRegistry()
        archive_id = registry.push_archive(ArchiveKind.ZIP, tmp_path / "music.zip", tmp_path)
        source = ArchiveSource(archive_id=archive_id, path="disc1/01.flac")

        assert registry.path(source) == tmp_path / "music" / "disc1" / "01.flac"
        assert registry.root(source) == tmp_path

    def test_archive_contents(self, tmp_path):
        archive = tmp_path / "music.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("01.flac", b"fLaC")
        registry = SourceRegistry()
        archive_id = registry.push_archive(ArchiveKind.ZIP, archive, tmp_path)

        assert registry.contents(ArchiveSource(archive_id, "01.flac")) == b"fLaC"

    def test_missing_archive_entry(self, tmp_path):
        archive = tmp_path / "music.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("01.flac", b"fLaC")
        registry = SourceRegistry()
        archive_id = registry.push_archive(ArchiveKind.ZIP, archive, tmp_path)

        with pytest.raises(ArchiveReadError, match="missing entry"):
            registry.contents(ArchiveSource(archive_id, "02.flac"))


class TestEntryNames:
    def test_backslash_is_separator(self):
        assert entry_parts("disc1\\01.flac") == ("disc1", "01.flac")

    def test_safe_entries(self):
        assert is_safe_entry("01.flac")
        assert is_safe_entry("disc1/01.flac")

    def test_rejects_parent_traversal(self):
        assert not is_safe_entry("../01.flac")
        assert not is_safe_entry("disc1/../../01.flac")
        assert not is_safe_entry("..\\01.flac")

    def test_rejects_absolute_and_empty(self):
        assert not is_safe_entry("/etc/passwd")
        assert not is_safe_entry("")
