"""FFmpeg progress parsing utilities.

FFmpeg reports progress on stderr in status lines such as::

    frame= 4855 fps= 46 q=31.0 size=   45306kB time=00:02:42.28 bitrate=2287.0kbits/

Status lines are rewritten in place with carriage returns, so the stream is
split into records on the ``size=`` token instead of on newlines. Each
record then holds at most one ``time=`` field.
"""

from __future__ import annotations

import re

PROGRESS_RECORD_DELIMITER = b"size="
"""Separator between FFmpeg status records on stderr."""

PROGRESS_MARKER = "time="
"""Substring that marks a record as carrying elapsed-time progress."""

# ffmpeg 0.8 and later: time=HH:MM:SS.ss
_ELAPSED_TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+\.\d+)")


def has_progress_marker(record: str) -> bool:
    """Check whether a record reports elapsed time."""
    return PROGRESS_MARKER in record


def parse_elapsed_seconds(record: str) -> float | None:
    """Parse the elapsed output time from a status record.

    Args:
        record: One decoded stderr record.

    Returns:
        None if the record has no progress marker. Seconds as
        ``H*3600 + M*60 + S`` if the marker matches ``HH:MM:SS.ss``.
        0.0 if the marker is present in any other shape (for example
        ``time=N/A`` before the first frame is muxed).
    """
    if not has_progress_marker(record):
        return None

    match = _ELAPSED_TIME_PATTERN.search(record)
    if match is None:
        return 0.0

    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def progress_fraction(elapsed: float, duration: float | None) -> float | None:
    """Normalize elapsed time against the input duration.

    The result is not clamped: container overhead can push elapsed time
    slightly past the probed duration, giving values just above 1.0.

    Args:
        elapsed: Elapsed output time in seconds.
        duration: Total input duration in seconds.

    Returns:
        elapsed / duration, or None when the duration is missing or not
        positive and progress cannot be expressed.
    """
    if duration is None or duration <= 0:
        return None
    return elapsed / duration
