"""Tests for meta.py -- tag normalization and metadata-derived path parts."""

import io
from unittest.mock import MagicMock, patch

import pytest
from mutagen import MutagenError
from mutagen.id3 import ID3, TALB, TDRC, TIT2, TPE1, TPOS, TRCK

from audiovert.archive import ArchiveKind
from audiovert.errors import MetadataError
from audiovert.meta import Parts, load_tags, normalize_tags, parse_year
from audiovert.models import ArchiveSource, FileSource
from audiovert.registry import SourceRegistry

FULL_TAGS = {
    "artist": "AC/DC",
    "album": "Greatest Hits: Vol. 1",
    "date": "1980-07-25",
    "title": "Back in Black",
    "tracknumber": "6/10",
}


class TestNormalizeTags:
    def test_vorbis_comments(self):
        tags = {
            "ARTIST": ["Nina Simone"],
            "Album Artist": ["Various"],
            "GENRE": ["Jazz", "Soul"],
            "COMMENT": [""],
        }
        assert normalize_tags(tags) == {
            "artist": "Nina Simone",
            "albumartist": "Various",
            "genre": "Jazz; Soul",
        }

    def test_id3_frames(self):
        tags = ID3()
        tags.add(TIT2(encoding=3, text=["Song"]))
        tags.add(TPE1(encoding=3, text=["Band"]))
        tags.add(TALB(encoding=3, text=["Record"]))
        tags.add(TRCK(encoding=3, text=["3/12"]))
        tags.add(TPOS(encoding=3, text=["1/2"]))
        tags.add(TDRC(encoding=3, text=["1999"]))

        assert normalize_tags(tags) == {
            "title": "Song",
            "artist": "Band",
            "album": "Record",
            "tracknumber": "3/12",
            "discnumber": "1/2",
            "date": "1999",
        }

    def test_no_tags(self):
        assert normalize_tags(None) == {}


class TestLoadTags:
    @patch("audiovert.meta.MutagenFile")
    def test_file_source(self, mock_file, tmp_path):
        f = tmp_path / "a.flac"
        f.write_bytes(b"fLaC")
        registry = SourceRegistry()
        file_id = registry.push_file(f, tmp_path)
        mock_file.return_value = MagicMock(tags={"TITLE": ["Song"]})

        assert load_tags(registry, FileSource(file_id)) == {"title": "Song"}
        mock_file.assert_called_once_with(f.resolve())

    @patch("audiovert.meta.MutagenFile")
    def test_archive_source_reads_bytes(self, mock_file, tmp_path):
        registry = SourceRegistry()
        archive_id = registry.push_archive(ArchiveKind.ZIP, tmp_path / "m.zip", tmp_path)
        mock_file.return_value = MagicMock(tags={"TITLE": ["Song"]})

        with patch.object(registry, "contents", return_value=b"fLaC"):
            tags = load_tags(registry, ArchiveSource(archive_id, "01.flac"))

        assert tags == {"title": "Song"}
        (arg,), _ = mock_file.call_args
        assert isinstance(arg, io.BytesIO)
        assert arg.getvalue() == b"fLaC"

    @patch("audiovert.meta.MutagenFile", return_value=None)
    def test_unrecognized(self, mock_file, tmp_path):
        registry = SourceRegistry()
        file_id = registry.push_file(tmp_path / "a.flac", tmp_path)

        with pytest.raises(MetadataError) as exc_info:
            load_tags(registry, FileSource(file_id))
        assert exc_info.value.messages == ["unrecognized audio file"]

    @patch("audiovert.meta.MutagenFile", side_effect=MutagenError("bad header"))
    def test_unreadable(self, mock_file, tmp_path):
        registry = SourceRegistry()
        file_id = registry.push_file(tmp_path / "a.flac", tmp_path)

        with pytest.raises(MetadataError, match="bad header"):
            load_tags(registry, FileSource(file_id))


class TestParseYear:
    def test_iso_date(self):
        assert parse_year("1980-07-25") == 1980

    def test_plain_year(self):
        assert parse_year("1969") == 1969

    def test_year_month(self):
        assert parse_year("1975-10") == 1975

    def test_garbage(self):
        assert parse_year("unknown") is None


class TestParts:
    def test_from_tags(self):
        parts = Parts.from_tags(FULL_TAGS)
        assert parts.year == 1980
        assert parts.artist == "AC/DC"
        assert parts.track == 6
        assert parts.disc is None

    def test_collects_every_missing_field(self):
        with pytest.raises(MetadataError) as exc_info:
            Parts.from_tags({"title": "Song"})
        assert exc_info.value.messages == [
            "missing year",
            "missing album",
            "missing artist",
            "missing track",
        ]

    def test_year_preference(self):
        tags = dict(FULL_TAGS, originalyear="1979", date="2003")
        assert Parts.from_tags(tags).year == 1979

    def test_year_falls_through_unparsable(self):
        tags = dict(FULL_TAGS, originaldate="someday", date="2003")
        assert Parts.from_tags(tags).year == 2003

    def test_album_artist_wins(self):
        tags = dict(FULL_TAGS, albumartist="Various Artists")
        assert Parts.from_tags(tags).artist == "Various Artists"

    def test_disc_from_disctotal(self):
        tags = dict(FULL_TAGS, discnumber="2", disctotal="3")
        assert Parts.from_tags(tags).disc == (2, 3)

    def test_segments_are_sanitized(self):
        segments = Parts.from_tags(FULL_TAGS).segments()
        assert segments == [
            "AC+DC",
            "AC+DC - Greatest Hits - Vol. 1 (1980)",
            "AC+DC - Greatest Hits - Vol. 1 - 06 - Back in Black",
        ]

    def test_multi_disc_segment(self):
        tags = dict(FULL_TAGS, discnumber="2/2", media="CD")
        segments = Parts.from_tags(tags).segments()
        assert segments[2] == "CD 02"
        assert len(segments) == 4

    def test_single_disc_has_no_disc_segment(self):
        tags = dict(FULL_TAGS, discnumber="1/1")
        assert len(Parts.from_tags(tags).segments()) == 3
