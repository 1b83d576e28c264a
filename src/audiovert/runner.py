"""Runner -- orchestrates discovery, planning, reporting, and execution."""

from __future__ import annotations

from loguru import logger

from .config import AudiovertConfig
from .errors import AbortError
from .models import Format, MetaDump, Tasks
from .output import Out
from .registry import SourceRegistry
from .stages import discover, execute, trash
from .stages import plan as plan_stage

log = logger.bind(stage="runner")


class AudiovertRunner:
    """Runs one audiovert invocation for a given configuration."""

    def __init__(self, config: AudiovertConfig, out: Out | None = None) -> None:
        self.config = config
        self.out = out or Out()

    def plan(self, forced: frozenset[Format] = frozenset()) -> Tasks:
        """Discover sources and build the task list without touching anything."""
        tasks = Tasks(registry=SourceRegistry())
        discover.run(self.config, tasks)
        plan_stage.run(self.config, tasks, forced=forced)
        return tasks

    def run(self) -> Tasks:
        """Plan, report diagnostics, then execute and trash.

        Raises ConfigError for bitrate overrides that match no format, and
        AbortError when planning produced errors and --keep-going is not set
        (nothing is executed in that case).
        """
        bitrates, forced = self.config.bitrate_plan()

        if self.config.dry_run:
            log.info("dry run: no files will be changed")

        tasks = self.plan(forced)
        self._report(tasks)

        if tasks.errors and not self.config.keep_going:
            raise AbortError("Aborting due to previous errors, use --keep-going to ignore.")

        if self.config.verbose:
            self._report_matches(tasks)

        execute.run(self.out, self.config, tasks, bitrates)
        trash.run(self.out, self.config, tasks)

        done = sum(1 for t in tasks.tasks if t.is_completed)
        log.info(f"{done}/{len(tasks.tasks)} tasks completed")
        return tasks

    def _report(self, tasks: Tasks) -> None:
        o = self.out
        registry = tasks.registry

        for u in tasks.unsupported:
            o.warn(f"Unsupported extension: {u.ext}")
            with o.indent():
                o.source(registry, u.source)

        if self.config.verbose:
            for e in tasks.already_exists:
                o.warn("already exists (--force to remove):")
                with o.indent():
                    o.source(registry, e.source)
                    o.path("to:", e.path)

        for e in tasks.errors:
            o.error("Error:")
            with o.indent():
                if e.source is not None:
                    o.source(registry, e.source)
                else:
                    o.path("path:", e.path)
                for m in e.messages:
                    o.error(m)

        for d in tasks.meta_dumps:
            self._dump_tags(tasks, d)

    def _dump_tags(self, tasks: Tasks, dump: MetaDump) -> None:
        o = self.out
        o.info("Tags:")
        with o.indent():
            o.source(tasks.registry, dump.source)
            for key, value in dump.items:
                o.info(f"{key!r}:")
                with o.indent():
                    o.blank(f"text: {value!r}")

    def _report_matches(self, tasks: Tasks) -> None:
        o = self.out
        for m in tasks.matching_conversions:
            to_formats = ", ".join(str(f) for f in m.to_formats)
            o.info(f"Found matching conversions: {m.from_} -> {to_formats}")
            with o.indent():
                o.source(tasks.registry, m.source)
