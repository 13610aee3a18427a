"""FFmpeg output helpers."""

from ffwatch.tools.ffmpeg_progress import (
    PROGRESS_MARKER,
    PROGRESS_RECORD_DELIMITER,
    has_progress_marker,
    parse_elapsed_seconds,
    progress_fraction,
)

__all__ = [
    "PROGRESS_MARKER",
    "PROGRESS_RECORD_DELIMITER",
    "has_progress_marker",
    "parse_elapsed_seconds",
    "progress_fraction",
]
