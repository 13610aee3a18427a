"""Types for supervised transcode runs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ffwatch.introspector.interface import MediaValidator

ProgressCallback = Callable[[float], None]
"""Receives progress samples: 0.0 at start, elapsed/duration per status
record, and 1.0 once after successful validation."""


class RunState(Enum):
    """Lifecycle of one supervised run."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SUBPROCESS_ERROR = "subprocess_error"
    TIMED_OUT = "timed_out"
    VALIDATION_FAILED = "validation_failed"


@dataclass(frozen=True)
class Succeeded:
    """The stream ended without a timeout and validation (if any) passed."""

    output: str
    exit_code: int | None = None

    state = RunState.SUCCEEDED


@dataclass(frozen=True)
class SubprocessFailed:
    """Validation failed and the process exited with a non-zero status."""

    output: str
    exit_code: int
    reasons: tuple[str, ...] = ()

    state = RunState.SUBPROCESS_ERROR


@dataclass(frozen=True)
class TimedOut:
    """The inactivity watchdog expired and the process was killed."""

    output: str

    state = RunState.TIMED_OUT


@dataclass(frozen=True)
class ValidationFailed:
    """The process exited cleanly but its artifacts did not validate."""

    output: str
    reasons: tuple[str, ...]

    state = RunState.VALIDATION_FAILED


RunOutcome = Succeeded | SubprocessFailed | TimedOut | ValidationFailed


@dataclass(frozen=True)
class EncodedArtifact:
    """Handle to a validated single output file."""

    path: Path

    @property
    def size(self) -> int:
        """Size of the artifact in bytes."""
        return self.path.stat().st_size


@dataclass(frozen=True)
class TranscodeOptions:
    """Per-run options for TranscodeSupervisor.

    Attributes:
        output_path: Expected output file. For multi-artifact runs (e.g.
            thumbnails) a printf-style pattern such as ``thumb_%03d.jpg``.
        artifact_count: Number of numbered artifacts the run produces. None
            for a single-output run.
        validate: Check the artifacts after the run. None uses the
            supervisor config's ``validate_output``.
        validator: Media validity check for single-output runs. None uses
            an ffprobe-backed validator.
    """

    output_path: Path | None = None
    artifact_count: int | None = None
    validate: bool | None = None
    validator: MediaValidator | None = None

    def __post_init__(self) -> None:
        if self.artifact_count is not None and self.artifact_count < 1:
            raise ValueError(
                f"artifact_count must be >= 1, got {self.artifact_count}"
            )
        if self.artifact_count is not None and self.output_path is None:
            raise ValueError("artifact_count requires an output_path pattern")

    @property
    def is_multi_artifact(self) -> bool:
        return self.artifact_count is not None

    def expected_paths(self) -> list[Path]:
        """Paths that must exist after a successful run."""
        if self.output_path is None:
            return []
        if self.artifact_count is None:
            return [self.output_path]
        pattern = str(self.output_path)
        return [Path(pattern % i) for i in range(1, self.artifact_count + 1)]
