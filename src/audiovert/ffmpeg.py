"""FFmpeg subprocess wrapper for conversions."""

import subprocess
from pathlib import Path

from loguru import logger

from .condition import Bitrates
from .errors import ExternalToolError
from .models import Format

log = logger.bind(stage="ffmpeg")

PIPE_INPUT = "pipe:"


def build_command(
    ffmpeg: str,
    input_arg: str,
    to: Format,
    output: Path,
    bitrates: Bitrates,
) -> list[str]:
    """Build the encoder command line.

    ``input_arg`` is a file path, or ``pipe:`` when the source bytes are fed
    on stdin.
    """
    cmd = [ffmpeg, "-hide_banner", "-loglevel", "error", "-i", input_arg]

    bitrate = bitrates.get(to)
    if bitrate:
        cmd += ["-ab", f"{bitrate}k"]

    cmd += ["-map_metadata", "0", "-id3v2_version", "3"]
    cmd += ["-f", to.container]
    cmd.append(str(output))
    return cmd


def run_encoder(cmd: list[str], stdin_data: bytes | None = None) -> None:
    """Run ffmpeg to completion.

    Blocks until the process exits. With ``stdin_data`` the whole buffer is
    written to the process's stdin first.

    Raises ExternalToolError on a non-zero exit and OSError if the process
    could not be spawned.
    """
    log.debug(f"run_encoder: {' '.join(cmd)}")

    if stdin_data is None:
        result = subprocess.run(cmd, stdin=subprocess.DEVNULL, capture_output=True)
    else:
        result = subprocess.run(cmd, input=stdin_data, capture_output=True)

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        log.debug(f"ffmpeg failed ({result.returncode}): {stderr[-500:]}")
        raise ExternalToolError(
            tool=cmd[0], exit_code=result.returncode, stderr=stderr[-500:],
        )
