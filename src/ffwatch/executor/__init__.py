"""Supervised execution of external transcoding processes."""

from ffwatch.executor.command import Command
from ffwatch.executor.exceptions import (
    EncodingFailedError,
    OutputStalledError,
    ProcessHungError,
    TranscodeError,
)
from ffwatch.executor.process import (
    DEFAULT_TERMINATOR,
    PosixTerminator,
    ProcessHandle,
    Terminator,
    WindowsTerminator,
    select_terminator,
    spawn,
)
from ffwatch.executor.reader import ActivityClock, LineTimeoutReader, iter_records
from ffwatch.executor.supervisor import TranscodeSupervisor
from ffwatch.executor.types import (
    EncodedArtifact,
    ProgressCallback,
    RunOutcome,
    RunState,
    SubprocessFailed,
    Succeeded,
    TimedOut,
    TranscodeOptions,
    ValidationFailed,
)

__all__ = [
    # Command and process
    "Command",
    "DEFAULT_TERMINATOR",
    "PosixTerminator",
    "ProcessHandle",
    "Terminator",
    "WindowsTerminator",
    "select_terminator",
    "spawn",
    # Reading
    "ActivityClock",
    "LineTimeoutReader",
    "iter_records",
    # Supervision
    "TranscodeSupervisor",
    "TranscodeOptions",
    "EncodedArtifact",
    "ProgressCallback",
    "RunOutcome",
    "RunState",
    "Succeeded",
    "SubprocessFailed",
    "TimedOut",
    "ValidationFailed",
    # Errors
    "TranscodeError",
    "ProcessHungError",
    "EncodingFailedError",
    "OutputStalledError",
]
