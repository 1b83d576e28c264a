"""Conversion rules and bitrate overrides.

A conversion rule is one of:

    same            keep every source in its own format
    <to>            convert everything to <to> (or "same")
    <from>=<to>     only sources matching <from> (lossless, lossy, or a format)

A bitrate override is ``<from>=<kbps>``; 0 restores the format default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from loguru import logger

from .errors import ConditionError, ConfigError
from .models import DEFAULT_BITRATES, Format

log = logger.bind(stage="condition")


def _parse_format(s: str) -> Format:
    fmt = Format.from_ext(s)
    if fmt is None:
        raise ConditionError(f"unsupported format: {s!r}")
    return fmt


# -- From side --


@dataclass(frozen=True)
class Lossless:
    def matches(self, fmt: Format) -> bool:
        return fmt.is_lossless

    def __str__(self) -> str:
        return "lossless"


@dataclass(frozen=True)
class Lossy:
    def matches(self, fmt: Format) -> bool:
        return not fmt.is_lossless

    def __str__(self) -> str:
        return "lossy"


@dataclass(frozen=True)
class Exact:
    format: Format

    def matches(self, fmt: Format) -> bool:
        return fmt is self.format

    def __str__(self) -> str:
        return str(self.format)


FromCondition = Lossless | Lossy | Exact


def parse_from(s: str) -> FromCondition:
    s = s.strip().lower()
    if s == "lossless":
        return Lossless()
    if s == "lossy":
        return Lossy()
    return Exact(_parse_format(s))


# -- To side --


@dataclass(frozen=True)
class SameFormat:
    def to_format(self, fmt: Format) -> Format:
        return fmt

    def __str__(self) -> str:
        return "same"


@dataclass(frozen=True)
class ExactFormat:
    format: Format

    def to_format(self, fmt: Format) -> Format:
        return self.format

    def __str__(self) -> str:
        return str(self.format)


ToCondition = SameFormat | ExactFormat


def parse_to(s: str) -> ToCondition:
    s = s.strip().lower()
    if s == "same":
        return SameFormat()
    return ExactFormat(_parse_format(s))


# -- Conditions --


@dataclass(frozen=True)
class Same:
    def to_format(self, fmt: Format) -> Format | None:
        return fmt

    def __str__(self) -> str:
        return "same"


@dataclass(frozen=True)
class To:
    to: ToCondition

    def to_format(self, fmt: Format) -> Format | None:
        return self.to.to_format(fmt)

    def __str__(self) -> str:
        return str(self.to)


@dataclass(frozen=True)
class FromTo:
    from_: FromCondition
    to: ToCondition

    def to_format(self, fmt: Format) -> Format | None:
        if self.from_.matches(fmt):
            return self.to.to_format(fmt)
        return None

    def __str__(self) -> str:
        return f"{self.from_}={self.to}"


Condition = Same | To | FromTo

DEFAULT_CONVERSIONS: tuple[str, ...] = ("lossless=mp3", "lossy=same")


def parse_condition(s: str) -> Condition:
    """Parse a conversion rule such as ``flac=mp3``, ``lossy=same`` or ``ogg``."""
    s = s.strip()
    if s.lower() == "same":
        return Same()
    from_, sep, to = s.partition("=")
    if not sep:
        return To(parse_to(s))
    return FromTo(parse_from(from_), parse_to(to))


def target_formats(conditions: Iterable[Condition], fmt: Format) -> list[Format]:
    """Union of every rule's target for ``fmt``, in Format declaration order."""
    targets = {t for c in conditions if (t := c.to_format(fmt)) is not None}
    return sorted(targets, key=lambda f: f.order)


# -- Bitrates --


@dataclass(frozen=True)
class SetBitrate:
    from_: FromCondition
    bitrate: int

    def __str__(self) -> str:
        return f"{self.from_}={self.bitrate}"


def parse_bitrate(s: str) -> SetBitrate:
    from_, sep, bitrate = s.strip().partition("=")
    if not sep:
        raise ConditionError("missing '=' separator")
    try:
        from_cond = parse_from(from_)
    except ConditionError as exc:
        raise ConditionError(f"invalid from condition: {exc}") from exc
    try:
        kbps = int(bitrate)
    except ValueError:
        raise ConditionError("invalid bitrate") from None
    if kbps < 0:
        raise ConditionError("invalid bitrate")
    return SetBitrate(from_=from_cond, bitrate=kbps)


class Bitrates:
    """Bitrate (kbps) per lossy target format, seeded with the defaults."""

    def __init__(self, overrides: dict[Format, int] | None = None) -> None:
        self._map: dict[Format, int] = dict(DEFAULT_BITRATES)
        if overrides:
            self._map.update(overrides)

    def get(self, fmt: Format) -> int | None:
        return self._map.get(fmt)

    def __contains__(self, fmt: Format) -> bool:
        return fmt in self._map

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitrates):
            return NotImplemented
        return self._map == other._map

    def __repr__(self) -> str:
        return f"Bitrates({self._map!r})"


def apply_bitrates(
    settings: Iterable[SetBitrate], force: bool = False,
) -> tuple[Bitrates, frozenset[Format]]:
    """Resolve bitrate overrides into a table and the set of forced formats.

    Formats in the forced set are re-encoded even when the source is already
    in the target format.
    """
    overrides: dict[Format, int] = {}
    forced: set[Format] = set()

    for setting in settings:
        matched = [
            f for f in Format
            if setting.from_.matches(f) and f.default_bitrate is not None
        ]
        if not matched:
            raise ConfigError(
                f"Cannot set custom bitrate for format: {setting.from_}"
            )
        for fmt in matched:
            overrides[fmt] = setting.bitrate or fmt.default_bitrate
            if force:
                forced.add(fmt)
        log.debug(f"bitrate {setting} -> {', '.join(str(f) for f in matched)}")

    return Bitrates(overrides), frozenset(forced)
