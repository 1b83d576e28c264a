"""audiovert -- idempotent batch conversion of audio files and archives.

Core modules:
    config    -- Configuration via pydantic-settings (AUDIOVERT_* env vars, .env).
                 CLI flags passed as kwargs; also owns loguru setup.
    cli       -- Click CLI entry point. Custom param types validate conversion
                 rules and bitrate overrides up front.
    runner    -- Orchestration: discover -> plan -> report -> execute -> trash.
    models    -- Formats, sources, tasks, and planning diagnostics
    errors    -- Exception hierarchy rooted at AudiovertError
    condition -- Conversion rule and bitrate override parsing and matching
    registry  -- Arena of discovered files and archives behind integer ids
    meta      -- Tag reading via mutagen, year/track/disc parsing, and the
                 Artist/Artist - Album (Year)/track naming layout
    sanitize  -- Path segment sanitization for tag-derived names
    ffmpeg    -- Encoder command line and subprocess wrapper
    shell     -- Bash-style escaping for displayed paths and commands
    output    -- Indentation-aware colorized progress output (click)

Subpackages:
    archive -- zip, rar, and 7z entry enumeration and extraction
    ops     -- Destination planning and filesystem primitives
    stages  -- discover, plan, execute, trash
"""

__version__ = "0.1.0"
