"""Tests for ops/transfer.py -- mkdir, transfers, atomic writes, cleanup."""

from io import StringIO
from unittest.mock import patch

import pytest

from audiovert.models import TransferKind
from audiovert.ops.transfer import (
    is_empty_dir,
    make_dir,
    remove_empty_parents,
    transfer_file,
    write_bytes_atomic,
)
from audiovert.output import Out


def _out():
    stream = StringIO()
    return Out(stream=stream, color=False), stream


class TestMakeDir:
    def test_existing_parent_is_silent(self, tmp_path):
        o, stream = _out()
        assert make_dir(o, "partial", tmp_path / "a.mp3.part")
        assert stream.getvalue() == ""

    def test_creates_and_reports(self, tmp_path):
        o, stream = _out()
        target = tmp_path / "x y" / "z" / "a.mp3"

        assert make_dir(o, "rename", target)

        assert target.parent.is_dir()
        lines = stream.getvalue().splitlines()
        assert lines[0] == "making rename dir"
        assert lines[1].startswith("  mkdir -p ")
        assert "x\\ y" in lines[1]

    def test_dry_run_creates_nothing(self, tmp_path):
        o, stream = _out()
        target = tmp_path / "new" / "a.mp3"

        assert make_dir(o, "link", target, dry_run=True)

        assert not target.parent.exists()
        assert "making link dir" in stream.getvalue()

    def test_failure_is_reported(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        o, stream = _out()

        assert not make_dir(o, "partial", blocker / "sub" / "a.mp3")
        assert len(stream.getvalue().splitlines()) == 3


class TestTransferFile:
    def test_link(self, tmp_path):
        src = tmp_path / "a.mp3"
        src.write_bytes(b"ID3")
        dest = tmp_path / "out.mp3"

        transfer_file(TransferKind.LINK, src, dest)

        assert dest.read_bytes() == b"ID3"
        assert dest.stat().st_ino == src.stat().st_ino

    def test_move(self, tmp_path):
        src = tmp_path / "a.mp3"
        src.write_bytes(b"ID3")
        dest = tmp_path / "out.mp3"

        transfer_file(TransferKind.MOVE, src, dest)

        assert not src.exists()
        assert dest.read_bytes() == b"ID3"

    def test_copy(self, tmp_path):
        src = tmp_path / "a.mp3"
        src.write_bytes(b"ID3")
        dest = tmp_path / "out.mp3"

        transfer_file(TransferKind.COPY, src, dest)

        assert src.exists()
        assert dest.read_bytes() == b"ID3"

    def test_link_onto_existing_fails(self, tmp_path):
        src = tmp_path / "a.mp3"
        src.write_bytes(b"ID3")
        dest = tmp_path / "out.mp3"
        dest.write_bytes(b"old")

        with pytest.raises(FileExistsError):
            transfer_file(TransferKind.LINK, src, dest)


class TestWriteBytesAtomic:
    def test_writes_through_part_file(self, tmp_path):
        dest = tmp_path / "a.flac"
        write_bytes_atomic(b"fLaC", dest, "part")
        assert dest.read_bytes() == b"fLaC"
        assert not (tmp_path / "a.flac.part").exists()

    def test_cleans_up_on_failure(self, tmp_path):
        dest = tmp_path / "a.flac"
        with patch("pathlib.Path.replace", side_effect=OSError("rename failed")):
            with pytest.raises(OSError, match="rename failed"):
                write_bytes_atomic(b"fLaC", dest, "part")
        assert not dest.exists()
        assert not (tmp_path / "a.flac.part").exists()


class TestRemoveEmptyParents:
    def test_is_empty_dir(self, tmp_path):
        assert is_empty_dir(tmp_path)
        (tmp_path / "f").write_text("x")
        assert not is_empty_dir(tmp_path)
        assert not is_empty_dir(tmp_path / "missing")

    def test_cascades_up_to_stop(self, tmp_path):
        deep = tmp_path / "root" / "a" / "b"
        deep.mkdir(parents=True)
        o, stream = _out()

        remove_empty_parents(o, deep, stop_at=tmp_path / "root")

        assert not (tmp_path / "root" / "a").exists()
        assert (tmp_path / "root").is_dir()
        assert stream.getvalue().count("removing empty directory:") == 2

    def test_stops_at_non_empty(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "keep.txt").write_text("x")
        o, _ = _out()

        remove_empty_parents(o, tmp_path / "a" / "b", stop_at=tmp_path)

        assert not (tmp_path / "a" / "b").exists()
        assert (tmp_path / "a").is_dir()

    def test_dry_run_removes_nothing(self, tmp_path):
        (tmp_path / "a").mkdir()
        o, stream = _out()

        remove_empty_parents(o, tmp_path / "a", stop_at=tmp_path, dry_run=True)

        assert (tmp_path / "a").is_dir()
        assert "removing empty directory:" in stream.getvalue()
