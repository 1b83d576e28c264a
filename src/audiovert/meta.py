"""Tag extraction via mutagen and metadata-derived path parts.

Tags are normalized into one lowercase key space regardless of container:
ID3 frames (mp3, wav, aac) are mapped to Vorbis-style names, Vorbis comments
(flac, ogg) are used as-is.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from datetime import date

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.id3 import ID3

from .errors import MetadataError
from .models import ArchiveSource, FileSource, Source
from .registry import SourceRegistry
from .sanitize import sanitize_segment

log = logger.bind(stage="meta")

# ID3 frame -> normalized key
_ID3_FRAMES = {
    "TIT2": "title",
    "TPE1": "artist",
    "TPE2": "albumartist",
    "TALB": "album",
    "TRCK": "tracknumber",
    "TPOS": "discnumber",
    "TDOR": "originaldate",
    "TORY": "originalyear",
    "TDRL": "releasedate",
    "TDRC": "date",
    "TYER": "year",
    "TMED": "media",
}

# Vorbis comment spellings seen in the wild -> normalized key
_VORBIS_ALIASES = {
    "album artist": "albumartist",
    "album_artist": "albumartist",
    "totaldiscs": "disctotal",
    "tracknum": "tracknumber",
}

# Year sources in order of preference.
_YEAR_KEYS = ("originaldate", "originalyear", "releasedate", "date", "year")


def load_tags(registry: SourceRegistry, source: Source) -> dict[str, str]:
    """Read and normalize the tags of a source.

    Raises MetadataError if the file cannot be parsed as audio, and
    ArchiveError if an archive-resident source cannot be read.
    """
    match source:
        case FileSource(file_id=file_id):
            target = registry.file(file_id).absolute
        case ArchiveSource():
            target = io.BytesIO(registry.contents(source))

    try:
        audio = MutagenFile(target)
    except MutagenError as exc:
        raise MetadataError([f"unreadable tags: {exc}"]) from exc

    if audio is None:
        raise MetadataError(["unrecognized audio file"])

    tags = normalize_tags(audio.tags)
    log.debug(f"loaded {len(tags)} tags from {registry.path(source)}")
    return tags


def normalize_tags(tags) -> dict[str, str]:
    """Flatten a mutagen tag container into ``{key: value}``."""
    if tags is None:
        return {}

    result: dict[str, str] = {}

    if isinstance(tags, ID3):
        for frame_id, key in _ID3_FRAMES.items():
            frame = tags.get(frame_id)
            if frame is not None and str(frame).strip():
                result.setdefault(key, str(frame))
        return result

    for raw_key in tags.keys():
        key = raw_key.lower()
        key = _VORBIS_ALIASES.get(key, key)
        values = tags[raw_key]
        if isinstance(values, list):
            value = "; ".join(str(v) for v in values)
        else:
            value = str(values)
        if value.strip():
            result.setdefault(key, value)

    return result


def parse_year(s: str) -> int | None:
    s = s.strip()
    try:
        return date.fromisoformat(s).year
    except ValueError:
        pass
    try:
        return int(s)
    except ValueError:
        pass
    m = re.match(r"^(\d{4})-", s)
    return int(m.group(1)) if m else None


def _parse_number(s: str | None) -> tuple[int | None, int | None]:
    """Parse ``"3"`` or ``"3/12"`` into (number, total)."""
    if not s:
        return None, None
    number, _, total = s.strip().partition("/")
    try:
        n = int(number)
    except ValueError:
        return None, None
    try:
        t = int(total) if total else None
    except ValueError:
        t = None
    return n, t


@dataclass(frozen=True)
class Parts:
    year: int
    artist: str
    album: str
    track: int
    title: str
    media_type: str | None = None
    disc: tuple[int, int] | None = None

    @classmethod
    def from_tags(cls, tags: dict[str, str]) -> Parts:
        """Build parts from normalized tags.

        Raises MetadataError listing every missing required field.
        """
        errors: list[str] = []

        year = None
        for key in _YEAR_KEYS:
            if key in tags and (year := parse_year(tags[key])) is not None:
                break
        if year is None:
            errors.append("missing year")

        album = tags.get("album", "").strip()
        if not album:
            errors.append("missing album")

        artist = (tags.get("albumartist") or tags.get("artist") or "").strip()
        if not artist:
            errors.append("missing artist")

        title = tags.get("title", "").strip()
        if not title:
            errors.append("missing title")

        track, _ = _parse_number(tags.get("tracknumber"))
        if track is None:
            errors.append("missing track")

        if errors:
            raise MetadataError(errors)

        disc = None
        disc_number, disc_total = _parse_number(tags.get("discnumber"))
        if disc_total is None:
            disc_total, _ = _parse_number(tags.get("disctotal"))
        if disc_number is not None and disc_total is not None:
            disc = (disc_number, disc_total)

        media_type = tags.get("media", "").strip() or None

        return cls(
            year=year,
            artist=artist,
            album=album,
            track=track,
            title=title,
            media_type=media_type,
            disc=disc,
        )

    def segments(self) -> list[str]:
        """Sanitized path components, without the file extension.

        Artist / Artist - Album (Year) / [<media> ]NN / Artist - Album - TT - Title
        """
        segments = [self.artist, f"{self.artist} - {self.album} ({self.year})"]

        if self.disc is not None and self.disc[1] > 1:
            number = f"{self.disc[0]:02}"
            segments.append(f"{self.media_type} {number}" if self.media_type else number)

        segments.append(f"{self.artist} - {self.album} - {self.track:02} - {self.title}")
        return [sanitize_segment(s) for s in segments]
