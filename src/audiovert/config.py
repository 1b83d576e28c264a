"""Configuration via pydantic-settings (.env + AUDIOVERT_* env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .condition import (
    DEFAULT_CONVERSIONS,
    Bitrates,
    Condition,
    apply_bitrates,
    parse_bitrate,
    parse_condition,
)
from .errors import ConditionError
from .models import Format

PART_EXT = "part"


class AudiovertConfig(BaseSettings):
    """All settings with layered resolution:
    .env file < environment variables < constructor kwargs (CLI flags).
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDIOVERT_",
        env_file=".env",
        extra="ignore",
    )

    # -- Inputs / outputs --
    paths: list[Path] = []
    to_dir: Path | None = None
    trash: Path | None = None

    # -- Rules --
    conversion: list[str] = list(DEFAULT_CONVERSIONS)
    bitrates: list[str] = []
    force_bitrates: bool = False

    # -- Naming --
    meta: bool = False
    meta_dump: bool = False
    meta_dump_error: bool = False
    part_ext: str = PART_EXT

    # -- Behavior --
    dry_run: bool = False
    force: bool = False
    keep_going: bool = False
    move: bool = False
    trash_source: bool = False
    verbose: bool = False
    ffmpeg_bin: str = "ffmpeg"

    # -- Logging --
    log_level: str = "WARNING"
    log_file: Path | None = None

    @field_validator("conversion")
    @classmethod
    def _check_conversion(cls, value: list[str]) -> list[str]:
        for rule in value:
            try:
                parse_condition(rule)
            except ConditionError as exc:
                raise ValueError(f"invalid conversion {rule!r}: {exc}") from exc
        return value or list(DEFAULT_CONVERSIONS)

    @field_validator("bitrates")
    @classmethod
    def _check_bitrates(cls, value: list[str]) -> list[str]:
        for rule in value:
            try:
                parse_bitrate(rule)
            except ConditionError as exc:
                raise ValueError(f"invalid bitrate {rule!r}: {exc}") from exc
        return value

    @field_validator("part_ext")
    @classmethod
    def _check_part_ext(cls, value: str) -> str:
        value = value.strip().lstrip(".")
        if not value or "/" in value:
            raise ValueError("part extension must be a non-empty file extension")
        return value

    @property
    def conditions(self) -> list[Condition]:
        return [parse_condition(rule) for rule in self.conversion]

    @property
    def scan_paths(self) -> list[Path]:
        return self.paths or [Path(".")]

    def bitrate_plan(self) -> tuple[Bitrates, frozenset[Format]]:
        """Bitrate table and the formats forced to re-encode.

        Raises ConfigError for overrides that match no lossy format.
        """
        return apply_bitrates(
            (parse_bitrate(rule) for rule in self.bitrates),
            force=self.force_bitrates,
        )

    def trash_dir(self) -> Path:
        """Explicit --trash, else ~/trash or ~/Trash if present, else ~/trash."""
        if self.trash is not None:
            return self.trash
        home = Path.home()
        for name in ("trash", "Trash"):
            if (home / name).is_dir():
                return home / name
        return home / "trash"

    def setup_logging(self) -> None:
        """Configure loguru for audiovert."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<10} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level="DEBUG" if self.verbose else self.log_level.upper(),
            filter=_default_extra,
        )

        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(self.log_file),
                format=log_format,
                level="DEBUG",
                rotation="10 MB",
                retention="30 days",
                filter=_default_extra,
            )
