"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_INACTIVITY_TIMEOUT: float = 300.0
"""Seconds without diagnostic output before a transcode is presumed hung."""

DEFAULT_POLL_INTERVAL: float = 0.1
"""Seconds between watchdog checks of the last-activity timestamp."""

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")


@dataclass
class SupervisorConfig:
    """Configuration for transcode supervision.

    Each TranscodeSupervisor receives its own instance; there is no
    process-wide timeout setting to mutate.
    """

    inactivity_timeout: float | None = DEFAULT_INACTIVITY_TIMEOUT
    """Maximum gap between diagnostic records. None or 0 disables the check."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    """How often the watchdog compares the clock against the timeout."""

    validate_output: bool = True
    """Verify output artifacts after the process exits."""

    priority: int | None = None
    """Niceness applied to the transcode command on POSIX hosts."""

    def __post_init__(self) -> None:
        if self.inactivity_timeout is not None and self.inactivity_timeout < 0:
            raise ValueError(
                f"inactivity_timeout must be >= 0, got {self.inactivity_timeout}"
            )
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")
        if self.priority is not None and not -20 <= self.priority <= 19:
            raise ValueError(
                f"priority must be between -20 and 19, got {self.priority}"
            )


@dataclass
class LoggingConfig:
    """Where ffwatch logs go and how they look."""

    level: str = "info"
    file: Path | None = None
    format: str = "text"

    # With a file set, also copy records to stderr
    include_stderr: bool = False

    # Rotation of the log file
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        if self.level.lower() not in LOG_LEVELS:
            raise ValueError(f"level must be one of {LOG_LEVELS}, got {self.level}")
        if self.format.lower() not in LOG_FORMATS:
            raise ValueError(f"format must be one of {LOG_FORMATS}, got {self.format}")


@dataclass
class FFwatchConfig:
    """Resolved configuration for one ffwatch invocation."""

    ffprobe_path: Path | None = None
    """ffprobe used for duration lookup and validation. None searches PATH."""

    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
