"""Exception hierarchy for audiovert."""


class AudiovertError(Exception):
    """Base exception for all audiovert errors."""


class ConfigError(AudiovertError):
    """Invalid or missing configuration."""


class ConditionError(ConfigError):
    """A conversion or bitrate rule could not be parsed."""


class InvalidId(AudiovertError):
    """A registry handle that was not produced by this registry."""


class ArchiveError(AudiovertError):
    """Base for archive failures."""


class ArchiveOpenError(ArchiveError):
    """An archive could not be opened or parsed."""


class ArchiveReadError(ArchiveError):
    """An entry inside an archive could not be read."""


class MetadataError(AudiovertError):
    """Required tag fields are missing or tags could not be read.

    Every problem found is kept in ``messages`` so they can be reported
    together against the source.
    """

    def __init__(self, messages: list[str]) -> None:
        super().__init__("incomplete tag information: " + ", ".join(messages))
        self.messages = messages


class PlanningError(AudiovertError):
    """A destination path could not be computed for a source."""


class ExternalToolError(AudiovertError):
    """An external subprocess (ffmpeg) failed."""

    def __init__(self, tool: str, exit_code: int, stderr: str) -> None:
        super().__init__(f"{tool} exited with code {exit_code}: {stderr}")
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr


class AbortError(AudiovertError):
    """Planning produced errors and --keep-going was not given."""
