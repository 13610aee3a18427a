"""Supervised execution of one transcoder run.

TranscodeSupervisor spawns the command, streams its stderr through a
LineTimeoutReader split on ffmpeg's ``size=`` status records, turns each
``time=`` marker into a progress sample and finally validates the artifacts
the run was expected to produce.

State transitions::

    IDLE -> RUNNING -> SUCCEEDED
                    -> SUBPROCESS_ERROR   (validation failed, non-zero exit)
                    -> VALIDATION_FAILED  (validation failed, zero exit)
                    -> TIMED_OUT          (inactivity watchdog expired)

There are no retries. A supervisor instance runs once.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from pathlib import Path

from ffwatch.config.models import SupervisorConfig
from ffwatch.core.string_utils import decode_with_fallback
from ffwatch.executor.command import Command
from ffwatch.executor.exceptions import (
    EncodingFailedError,
    OutputStalledError,
    ProcessHungError,
)
from ffwatch.executor.process import ProcessHandle, spawn
from ffwatch.executor.reader import LineTimeoutReader
from ffwatch.executor.types import (
    EncodedArtifact,
    ProgressCallback,
    RunOutcome,
    RunState,
    Succeeded,
    SubprocessFailed,
    TimedOut,
    TranscodeOptions,
    ValidationFailed,
)
from ffwatch.introspector.interface import MediaValidator
from ffwatch.logging.context import run_context
from ffwatch.tools.ffmpeg_progress import (
    PROGRESS_RECORD_DELIMITER,
    has_progress_marker,
    parse_elapsed_seconds,
    progress_fraction,
)

logger = logging.getLogger(__name__)

NO_OUTPUT_FILE = "no output file created"
INVALID_OUTPUT_FILE = "encoded file is invalid"


class TranscodeSupervisor:
    """Runs a Command once and classifies how it ended.

    Attributes:
        output: Decoded stderr accumulated so far. Complete once run() has
            returned or raised.
        outcome: Final RunOutcome, None until the run has ended.
        errors: Validation failure reasons of the last run.

    Example:
        >>> supervisor = TranscodeSupervisor(
        ...     Command("ffmpeg -i in.mkv out.mp4"),
        ...     total_duration=3600.0,
        ...     options=TranscodeOptions(output_path=Path("out.mp4")),
        ... )
        >>> artifact = supervisor.run(lambda p: print(f"{p:.0%}"))  # doctest: +SKIP
    """

    def __init__(
        self,
        command: Command,
        total_duration: float | None,
        options: TranscodeOptions | None = None,
        config: SupervisorConfig | None = None,
        spawner: Callable[[Command], ProcessHandle] = spawn,
    ) -> None:
        """Initialize the supervisor.

        Args:
            command: Ready-to-run shell command.
            total_duration: Input duration in seconds used to normalize
                progress. None or non-positive disables progress samples
                derived from status records.
            options: Expected artifacts and validation settings.
            config: Timeout, polling and validation defaults.
            spawner: Starts the command. Replaced in tests.
        """
        self.command = command
        self.total_duration = total_duration
        self.options = options or TranscodeOptions()
        self.config = config or SupervisorConfig()
        self._spawner = spawner
        self._validator: MediaValidator | None = self.options.validator

        self.output = ""
        self.outcome: RunOutcome | None = None
        self.errors: list[str] = []
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        if self.outcome is not None:
            return self.outcome.state
        return self._state

    @property
    def validate(self) -> bool:
        if self.options.validate is not None:
            return self.options.validate
        return self.config.validate_output

    @property
    def validator(self) -> MediaValidator:
        """Validator for single-output runs, ffprobe-backed by default."""
        if self._validator is None:
            from ffwatch.introspector.ffprobe import FFprobeIntrospector

            self._validator = FFprobeIntrospector()
        return self._validator

    def run(
        self, progress_callback: ProgressCallback | None = None
    ) -> EncodedArtifact | bool | None:
        """Execute the command and wait for it to finish.

        Args:
            progress_callback: Receives 0.0 at start, a sample per status
                record, and 1.0 once after successful validation.

        Returns:
            With validation enabled: the EncodedArtifact for a single-output
            run, or True for a multi-artifact run. With validation disabled:
            None, whatever the exit status.

        Raises:
            RuntimeError: If this supervisor has already run.
            ProcessHungError: If the process stopped producing output for
                longer than the inactivity timeout. It has been killed.
            EncodingFailedError: If expected artifacts are missing or invalid.
            OSError: If the shell could not be started.
        """
        if self._state is not RunState.IDLE:
            raise RuntimeError("TranscodeSupervisor instances run only once")

        output_path = self.options.output_path
        with run_context(
            uuid.uuid4().hex[:8], str(output_path) if output_path else None
        ):
            return self._run(progress_callback)

    def _run(
        self, progress_callback: ProgressCallback | None
    ) -> EncodedArtifact | bool | None:
        command_line = str(self.command)
        logger.info("Running transcoding...\n%s", command_line)

        handle = self._spawner(self.command)
        self._state = RunState.RUNNING
        try:
            reader = LineTimeoutReader(
                handle.stderr,
                PROGRESS_RECORD_DELIMITER,
                self.config.inactivity_timeout,
                on_timeout=handle.terminate,
                poll_interval=self.config.poll_interval,
            )
            try:
                if progress_callback is not None:
                    progress_callback(0.0)
                reader.each(lambda record: self._on_record(record, progress_callback))
                exit_code = handle.wait()
            except OutputStalledError as e:
                self.outcome = TimedOut(self.output)
                logger.error(
                    "Transcoding hung (%s)\nCommand: %s\nOutput: %s",
                    e,
                    command_line,
                    self.output,
                )
                raise ProcessHungError(
                    command=command_line, output=self.output
                ) from e
            except BaseException as e:
                # Abandoned runs (callback error, Ctrl-C) must not leave the
                # transcoder running while close() waits for it
                logger.warning("Run aborted (%s), killing transcoder", type(e).__name__)
                handle.terminate()
                raise

            return self._finish(exit_code, command_line, progress_callback)
        finally:
            handle.close()

    def _on_record(
        self, record: bytes, progress_callback: ProgressCallback | None
    ) -> None:
        text = decode_with_fallback(record)
        self.output += text

        if progress_callback is None or not has_progress_marker(text):
            return
        elapsed = parse_elapsed_seconds(text) or 0.0
        fraction = progress_fraction(elapsed, self.total_duration)
        if fraction is not None:
            progress_callback(fraction)

    def _finish(
        self,
        exit_code: int,
        command_line: str,
        progress_callback: ProgressCallback | None,
    ) -> EncodedArtifact | bool | None:
        if not self.validate:
            if exit_code != 0:
                logger.warning(
                    "Transcoding exited with status %d; output not validated",
                    exit_code,
                )
            self.outcome = Succeeded(self.output, exit_code)
            return None

        self.errors = self._validate_artifacts()
        if self.errors:
            if exit_code != 0:
                self.outcome = SubprocessFailed(
                    self.output, exit_code, tuple(self.errors)
                )
            else:
                self.outcome = ValidationFailed(self.output, tuple(self.errors))
            logger.error(
                "Transcoding failed: %s\nCommand: %s\nOutput: %s",
                ", ".join(self.errors),
                command_line,
                self.output,
            )
            raise EncodingFailedError(
                self.errors,
                command=command_line,
                output=self.output,
                exit_code=exit_code if exit_code != 0 else None,
            )

        self.outcome = Succeeded(self.output, exit_code)
        if progress_callback is not None:
            progress_callback(1.0)

        if self.options.is_multi_artifact:
            logger.info(
                "Transcoding succeeded: %d artifacts", self.options.artifact_count
            )
            return True

        output_path = self.options.output_path
        assert output_path is not None
        logger.info("Transcoding succeeded: %s", output_path)
        return EncodedArtifact(Path(output_path))

    def _validate_artifacts(self) -> list[str]:
        errors: list[str] = []
        expected = self.options.expected_paths()
        if not expected:
            # Nothing was declared, so nothing can have been created
            return [NO_OUTPUT_FILE]
        for path in expected:
            if not path.exists():
                logger.debug("Expected artifact missing: %s", path)
                errors.append(NO_OUTPUT_FILE)
                break

        if not self.options.is_multi_artifact and not errors:
            if not self.validator.is_valid(expected[0]):
                errors.append(INVALID_OUTPUT_FILE)
        return errors
