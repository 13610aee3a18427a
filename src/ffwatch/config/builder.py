"""Layered configuration sources.

Every place a setting can come from (config file, environment, command
line) is reduced to a ConfigSource whose None fields mean "not set here".
ConfigBuilder stacks sources in precedence order and builds the final
FFwatchConfig, remembering which source supplied each value.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ffwatch.config.models import FFwatchConfig, LoggingConfig, SupervisorConfig

logger = logging.getLogger(__name__)


@dataclass
class ConfigSource:
    """Values from a single source. None leaves lower layers in place.

    A timeout of 0 is a real value: it disables the watchdog.
    """

    ffprobe_path: Path | None = None

    inactivity_timeout: float | None = None
    poll_interval: float | None = None
    validate_output: bool | None = None
    priority: int | None = None

    log_level: str | None = None
    log_file: Path | None = None
    log_format: str | None = None
    log_include_stderr: bool | None = None
    log_max_bytes: int | None = None
    log_backup_count: int | None = None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_path(value: str) -> Path:
    return Path(value).expanduser()


ENV_VARIABLES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "FFWATCH_FFPROBE_PATH": ("ffprobe_path", _parse_path),
    "FFWATCH_INACTIVITY_TIMEOUT": ("inactivity_timeout", float),
    "FFWATCH_POLL_INTERVAL": ("poll_interval", float),
    "FFWATCH_VALIDATE_OUTPUT": ("validate_output", _parse_bool),
    "FFWATCH_PRIORITY": ("priority", int),
    "FFWATCH_LOG_LEVEL": ("log_level", str),
    "FFWATCH_LOG_FILE": ("log_file", _parse_path),
    "FFWATCH_LOG_FORMAT": ("log_format", str),
}
"""Environment variable -> (ConfigSource field, parser)."""

FILE_KEYS: dict[tuple[str, str], str] = {
    ("tools", "ffprobe"): "ffprobe_path",
    ("supervisor", "inactivity_timeout"): "inactivity_timeout",
    ("supervisor", "poll_interval"): "poll_interval",
    ("supervisor", "validate_output"): "validate_output",
    ("supervisor", "priority"): "priority",
    ("logging", "level"): "log_level",
    ("logging", "file"): "log_file",
    ("logging", "format"): "log_format",
    ("logging", "include_stderr"): "log_include_stderr",
    ("logging", "max_bytes"): "log_max_bytes",
    ("logging", "backup_count"): "log_backup_count",
}
"""(TOML table, key) -> ConfigSource field."""

_PATH_FIELDS = frozenset(("ffprobe_path", "log_file"))
_SUPERVISOR_FIELDS = ("inactivity_timeout", "poll_interval", "validate_output", "priority")


def source_from_file(file_config: Mapping[str, Any]) -> ConfigSource:
    """Pick the known settings out of a parsed config file.

    Expected layout::

        [tools]
        ffprobe = "/usr/local/bin/ffprobe"

        [supervisor]
        inactivity_timeout = 120
        validate_output = true

        [logging]
        level = "debug"

    Unknown tables and keys are ignored.
    """
    values: dict[str, Any] = {}
    for (table, key), name in FILE_KEYS.items():
        section = file_config.get(table)
        if not isinstance(section, Mapping):
            continue
        value = section.get(key)
        if value is None or value == "":
            continue
        values[name] = _parse_path(value) if name in _PATH_FIELDS else value
    return ConfigSource(**values)


def source_from_env(env: Mapping[str, str] | None = None) -> ConfigSource:
    """Read the FFWATCH_* variables.

    Args:
        env: Mapping to read instead of os.environ (for tests).

    Returns:
        ConfigSource with every variable that is set and parses. Values that
        do not parse are logged and skipped.
    """
    if env is None:
        env = os.environ

    values: dict[str, Any] = {}
    for variable, (name, parse) in ENV_VARIABLES.items():
        raw = env.get(variable)
        if raw is None:
            continue
        try:
            values[name] = parse(raw)
        except ValueError:
            logger.warning("Ignoring invalid value for %s: %r", variable, raw)
    return ConfigSource(**values)


class ConfigBuilder:
    """Stacks ConfigSources; non-None values of later sources win.

    Example:
        config = (
            ConfigBuilder()
            .apply(source_from_file(parsed_toml), "file")
            .apply(source_from_env(), "env")
            .apply(ConfigSource(priority=10), "cli")
            .build()
        )
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._origins: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> ConfigBuilder:
        for name, value in vars(source).items():
            if value is not None:
                self._values[name] = value
                self._origins[name] = source_name
        return self

    def origin_of(self, name: str) -> str:
        """Name of the source that set a value, or "default"."""
        return self._origins.get(name, "default")

    def build(self) -> FFwatchConfig:
        """Resolve the stacked values into an FFwatchConfig.

        Raises:
            ValueError: If a value fails model validation.
        """
        supervisor = {
            name: self._values[name]
            for name in _SUPERVISOR_FIELDS
            if name in self._values
        }
        if "inactivity_timeout" in supervisor:
            # 0 and None both disable the watchdog; keep one spelling
            supervisor["inactivity_timeout"] = supervisor["inactivity_timeout"] or None

        log_settings = {
            name.removeprefix("log_"): value
            for name, value in self._values.items()
            if name.startswith("log_")
        }

        return FFwatchConfig(
            ffprobe_path=self._values.get("ffprobe_path"),
            supervisor=SupervisorConfig(**supervisor),
            logging=LoggingConfig(**log_settings),
        )
