"""Failures that end a supervised transcode.

Only these cross the supervisor boundary. Malformed progress markers and
undecodable output bytes are absorbed with defaults and never raised.
"""

from __future__ import annotations


class OutputStalledError(TimeoutError):
    """Raised by LineTimeoutReader when no record arrives in time."""

    def __init__(self, idle_seconds: float, timeout: float) -> None:
        self.idle_seconds = idle_seconds
        self.timeout = timeout
        super().__init__(
            f"output wait time expired: no output for {idle_seconds:.1f}s "
            f"(limit {timeout}s)"
        )


class TranscodeError(Exception):
    """Base class for supervised transcode failures.

    Always carries the command and the full diagnostic output collected up
    to the failure, so the run can be diagnosed without repeating it.
    """

    def __init__(self, message: str, *, command: str, output: str) -> None:
        self.command = command
        self.output = output
        super().__init__(message)


class ProcessHungError(TranscodeError):
    """The process produced no output for longer than the inactivity timeout.

    The process has already been killed when this is raised.
    """

    def __init__(self, *, command: str, output: str) -> None:
        super().__init__(
            f"Process hung. Command: {command}. Full output: {output}",
            command=command,
            output=output,
        )


class EncodingFailedError(TranscodeError):
    """Output validation failed after the process exited."""

    def __init__(
        self,
        reasons: list[str],
        *,
        command: str,
        output: str,
        exit_code: int | None = None,
    ) -> None:
        self.reasons = list(reasons)
        self.exit_code = exit_code
        super().__init__(
            f"Failed encoding. Errors: {', '.join(self.reasons)}. "
            f"Command: {command}. Full output: {output}",
            command=command,
            output=output,
        )
