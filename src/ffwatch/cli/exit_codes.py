"""Exit statuses of the ffwatch CLI.

Failures are grouped by tens (1x configuration, 2x input files, 3x missing
tools, 4x failed runs), so wrapper scripts can tell a transcode that hung
from one that finished with bad output.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0

    # The command could not be started
    GENERAL_ERROR = 1

    CONFIG_ERROR = 11
    TARGET_NOT_FOUND = 20

    # ffprobe missing
    TOOL_NOT_AVAILABLE = 30

    # Output missing or invalid after the command exited
    OPERATION_FAILED = 40

    # No output for longer than the inactivity timeout; the command was killed
    PROCESS_HUNG = 43

    # Ctrl-C; the command was killed (128 + SIGINT)
    INTERRUPTED = 130
