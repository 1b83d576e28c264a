"""Plan stage -- turn discovered sources into idempotent tasks.

For every (source, target format) pair:

1. Compute the destination (metadata-derived when --meta is set).
2. Drop it if a plain file would be written onto itself.
3. Same format (and not forced to re-encode) -> Transfer, otherwise Convert.
4. Reconcile with the filesystem: an existing destination is skipped unless
   --force (then queued for removal), a stale partial file is queued for
   removal.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..condition import target_formats
from ..config import AudiovertConfig
from ..errors import ArchiveError, MetadataError, PlanningError
from ..meta import Parts, load_tags
from ..models import (
    ArchiveSource,
    Convert,
    Exists,
    FileSource,
    Format,
    MatchingConversion,
    MetaDump,
    Source,
    Task,
    Tasks,
    Transfer,
    TransferKind,
)
from ..ops.paths import part_path, plan_destination, same_path

log = logger.bind(stage="plan")


def run(
    config: AudiovertConfig,
    tasks: Tasks,
    forced: frozenset[Format] = frozenset(),
) -> None:
    """Build ``tasks.tasks`` from ``tasks.sources``.

    ``forced`` holds formats that are re-encoded even when source and target
    format match (from --bitrates with --force-bitrates).
    """
    conditions = config.conditions

    for source, fmt in tasks.sources:
        targets = target_formats(conditions, fmt)
        if not targets:
            continue

        tasks.matching_conversions.append(
            MatchingConversion(source=source, from_=fmt, to_formats=targets)
        )

        parts = None
        if config.meta:
            # No destination can be computed without the tags, so a failure
            # here drops every task for this source.
            parts = _extract_parts(config, tasks, source)
            if parts is None:
                continue

        for to in targets:
            _plan_task(config, tasks, source, fmt, to, parts, forced)

    log.debug(f"planned {len(tasks.tasks)} tasks")


def _extract_parts(config: AudiovertConfig, tasks: Tasks, source: Source) -> Parts | None:
    path = tasks.registry.path(source)
    tags: dict[str, str] = {}
    parts = None

    try:
        tags = load_tags(tasks.registry, source)
        parts = Parts.from_tags(tags)
    except MetadataError as exc:
        for message in exc.messages:
            tasks.error(source, path, message)
    except ArchiveError as exc:
        tasks.error(source, path, str(exc))

    if config.meta_dump or (config.meta_dump_error and parts is None):
        tasks.meta_dumps.append(MetaDump(source=source, items=list(tags.items())))

    return parts


def _transfer_kind(config: AudiovertConfig, source: Source) -> TransferKind:
    # Archives are read-only: extraction is the only valid transfer.
    if isinstance(source, ArchiveSource):
        return TransferKind.COPY
    if config.move:
        return TransferKind.MOVE
    return TransferKind.LINK


def _plan_task(
    config: AudiovertConfig,
    tasks: Tasks,
    source: Source,
    fmt: Format,
    to: Format,
    parts: Parts | None,
    forced: frozenset[Format],
) -> None:
    path = tasks.registry.path(source)
    root = tasks.registry.root(source)

    try:
        dest = plan_destination(path, root, to, to_dir=config.to_dir, parts=parts)
    except PlanningError as exc:
        tasks.error(source, path, str(exc))
        return

    if isinstance(source, FileSource) and same_path(dest, path):
        log.debug(f"skipping self-conversion: {path}")
        return

    if fmt is to and to not in forced:
        kind = Transfer(kind=_transfer_kind(config, source))
    else:
        kind = Convert(part_path=part_path(dest, config.part_ext), from_=fmt, to=to)

    task = Task(index=len(tasks.tasks), source=source, to_path=dest, kind=kind)

    if _exists(dest):
        if config.force:
            task.pre_remove.append(("existing file", dest))
        else:
            tasks.already_exists.append(Exists(source=source, path=dest))
            if isinstance(kind, Convert):
                kind.converted = True
            task.moved = True

    if isinstance(kind, Convert) and not task.is_completed and _exists(kind.part_path):
        task.pre_remove.append(("partial file", kind.part_path))

    tasks.tasks.append(task)


def _exists(path: Path) -> bool:
    # lexists: a dangling symlink still blocks the destination name.
    return path.exists() or path.is_symlink()
