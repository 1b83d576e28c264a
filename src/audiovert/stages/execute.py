"""Execute stage -- run planned tasks against the filesystem and ffmpeg.

Each incomplete task runs its pending pre-removals, then either converts
through a partial file and renames it into place, or transfers the source.
State flags on the task are only set once a step has succeeded, so a task
left incomplete here is retried from the right step on the next run.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..condition import Bitrates
from ..config import AudiovertConfig
from ..errors import AudiovertError
from ..ffmpeg import PIPE_INPUT, build_command, run_encoder
from ..models import ArchiveSource, Convert, FileSource, Task, Tasks, Transfer
from ..ops.transfer import make_dir, transfer_file, write_bytes_atomic
from ..output import Out
from ..shell import escape, format_command

log = logger.bind(stage="execute")


def run(o: Out, config: AudiovertConfig, tasks: Tasks, bitrates: Bitrates) -> None:
    """Run every task that is not already completed, in index order."""
    total = len(tasks.tasks)

    for task in tasks.tasks:
        if task.is_completed:
            continue

        o.info(f"Task #{task.index + 1}/#{total}: {task.kind}")
        with o.indent():
            o.source(tasks.registry, task.source)
            o.path("to:", task.to_path)

            if not _pre_remove(o, config, task):
                continue

            match task.kind:
                case Convert() as kind:
                    _convert(o, config, tasks, task, kind, bitrates)
                case Transfer() as kind:
                    _transfer(o, config, tasks, task, kind)

    done = sum(1 for t in tasks.tasks if t.is_completed)
    log.debug(f"{done}/{total} tasks completed")


def _placeholder(config: AudiovertConfig, task: Task, path: Path) -> str:
    if config.verbose:
        return escape(path)
    if path == task.to_path:
        return "<to>"
    return f"<to>.{config.part_ext}"


def _pre_remove(o: Out, config: AudiovertConfig, task: Task) -> bool:
    """Remove queued paths. False if one failed; it stays queued."""
    while task.pre_remove:
        reason, path = task.pre_remove[0]

        o.info(f"removing {reason}")
        with o.indent():
            o.blank(f"rm {_placeholder(config, task, path)}")

            if not config.dry_run:
                try:
                    path.unlink(missing_ok=True)
                except OSError as exc:
                    o.error(exc)
                    return False

        task.pre_remove.pop(0)

    return True


def _convert(
    o: Out,
    config: AudiovertConfig,
    tasks: Tasks,
    task: Task,
    kind: Convert,
    bitrates: Bitrates,
) -> None:
    if not kind.converted:
        if isinstance(task.source, FileSource):
            input_arg = str(tasks.registry.file(task.source.file_id).absolute)
        else:
            input_arg = PIPE_INPUT

        cmd = build_command(config.ffmpeg_bin, input_arg, kind.to, kind.part_path, bitrates)

        replacements: dict[str, str] = {}
        if not config.verbose:
            replacements[config.ffmpeg_bin] = "<ffmpeg>"
            if input_arg != PIPE_INPUT:
                replacements[input_arg] = "<from>"
            replacements[str(kind.part_path)] = f"<to>.{config.part_ext}"

        if not make_dir(o, "partial", kind.part_path, config.dry_run):
            return

        o.blank(format_command(cmd, replacements))
        with o.indent():
            if not config.dry_run:
                try:
                    stdin_data = None
                    if isinstance(task.source, ArchiveSource):
                        stdin_data = tasks.registry.contents(task.source)
                    run_encoder(cmd, stdin_data)
                except (AudiovertError, OSError) as exc:
                    o.error(exc)
                    return

        kind.converted = True

    if task.moved:
        return

    if not make_dir(o, "rename", task.to_path, config.dry_run):
        return

    o.blank(f"mv <to>.{config.part_ext} <to>")
    with o.indent():
        if config.verbose:
            o.path("from:", kind.part_path)
            o.path("to:", task.to_path)

        if not config.dry_run:
            try:
                kind.part_path.replace(task.to_path)
            except OSError as exc:
                o.error(exc)
                return

    task.moved = True


def _transfer(
    o: Out, config: AudiovertConfig, tasks: Tasks, task: Task, kind: Transfer,
) -> None:
    if task.moved:
        return

    if not make_dir(o, kind.kind.value, task.to_path, config.dry_run):
        return

    if config.verbose:
        o.source(tasks.registry, task.source)
        o.path("to:", task.to_path)
    else:
        o.blank(f"{kind.kind.symbolic_command} <from> <to>")

    if not config.dry_run:
        try:
            match task.source:
                case FileSource(file_id=file_id):
                    source_path = tasks.registry.file(file_id).absolute
                    transfer_file(kind.kind, source_path, task.to_path)
                case ArchiveSource() as source:
                    data = tasks.registry.contents(source)
                    write_bytes_atomic(data, task.to_path, config.part_ext)
        except (AudiovertError, OSError) as exc:
            with o.indent():
                o.error(exc)
            return

    task.moved = True
