"""CLI entry point for audiovert."""

from pathlib import Path

import click
from loguru import logger
from pydantic import ValidationError

from .condition import parse_bitrate, parse_condition
from .config import AudiovertConfig
from .errors import AudiovertError, ConditionError
from .output import Out
from .runner import AudiovertRunner

log = logger.bind(stage="cli")


class ConditionType(click.ParamType):
    """A conversion rule such as ``lossless=mp3``, ``flac``, or ``same``."""

    name = "conversion"

    def convert(self, value, param, ctx):
        try:
            parse_condition(value)
        except ConditionError as exc:
            self.fail(f"{value!r}: {exc}", param, ctx)
        return value


class BitrateType(click.ParamType):
    """A bitrate override such as ``mp3=256`` or ``lossy=0``."""

    name = "bitrate"

    def convert(self, value, param, ctx):
        try:
            parse_bitrate(value)
        except ConditionError as exc:
            self.fail(f"{value!r}: {exc}", param, ctx)
        return value


CONDITION = ConditionType()
BITRATE = BitrateType()


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "-c",
    "--conversion",
    multiple=True,
    type=CONDITION,
    help="Conversion rule, repeatable. [default: lossless=mp3, lossy=same]",
)
@click.option(
    "-o",
    "--to",
    "to_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write outputs under this directory instead of next to the sources.",
)
@click.option("--meta", is_flag=True, help="Name outputs from their tags.")
@click.option("--meta-dump", is_flag=True, help="Print the tags of every source.")
@click.option(
    "--meta-dump-error",
    is_flag=True,
    help="Print the tags of sources whose tags are incomplete.",
)
@click.option("-f", "--force", is_flag=True, help="Remove existing destinations.")
@click.option("--move", is_flag=True, help="Move same-format sources instead of linking.")
@click.option(
    "--trash",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Trash directory. [default: ~/trash]",
)
@click.option(
    "-r",
    "--trash-source",
    is_flag=True,
    help="Trash source files once all their conversions completed.",
)
@click.option(
    "--bitrates",
    multiple=True,
    type=BITRATE,
    help="Bitrate override <from>=<kbps>, repeatable. 0 restores the default.",
)
@click.option(
    "--force-bitrates",
    is_flag=True,
    help="Re-encode same-format sources covered by --bitrates.",
)
@click.option(
    "-D", "--dry-run", is_flag=True,
    help="Show what would happen without doing it. Does not imply --verbose.",
)
@click.option("-k", "--keep-going", is_flag=True, help="Run tasks despite planning errors.")
@click.option("--part-ext", default=None, help="Extension of partial files. [default: part]")
@click.option("--ffmpeg-bin", default=None, help="ffmpeg executable. [default: ffmpeg]")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output and debug logging.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for stderr. [default: WARNING]",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write debug logs to this file.",
)
@click.option(
    "--config-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to .env file.",
)
def main(paths: tuple[Path, ...], config_file: Path | None, **options) -> None:
    """Convert audio files and archives to other formats, idempotently.

    PATHS are files, archives (zip, rar, 7z), or directories to scan
    [default: .].
    """
    # Pass CLI flags as kwargs so they win over env and .env; unset ones
    # fall through.
    config_kwargs: dict[str, object] = {}
    if paths:
        config_kwargs["paths"] = list(paths)
    for key, value in options.items():
        if value is None or value is False or value == ():
            continue
        config_kwargs[key] = list(value) if isinstance(value, tuple) else value

    if config_file is not None:
        config_kwargs["_env_file"] = config_file

    try:
        config = AudiovertConfig(**config_kwargs)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc

    config.setup_logging()
    log.debug(f"config: {config.model_dump()}")

    runner = AudiovertRunner(config=config, out=Out())
    try:
        runner.run()
    except AudiovertError as exc:
        raise click.ClickException(str(exc)) from exc
