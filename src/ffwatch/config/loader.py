"""Resolve the ffwatch configuration.

Precedence, highest first: command line, FFWATCH_* environment variables,
the TOML config file, built-in defaults. The config file lives at
``$FFWATCH_CONFIG_PATH`` if set, else ``<data dir>/config.toml`` where the
data dir is ``$FFWATCH_DATA_DIR`` or ``~/.ffwatch``.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ffwatch.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from ffwatch.config.models import FFwatchConfig
from ffwatch.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".ffwatch"

# path -> (mtime, parsed content)
_file_cache: dict[Path, tuple[float, dict[str, Any]]] = {}
_file_cache_lock = threading.Lock()


def get_data_dir() -> Path:
    env_path = os.environ.get("FFWATCH_DATA_DIR")
    return Path(env_path).expanduser() if env_path else DEFAULT_DATA_DIR


def get_default_config_path() -> Path:
    env_path = os.environ.get("FFWATCH_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_data_dir() / "config.toml"


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Parse the config file, reusing the last result while its mtime holds.

    A missing file yields {}. See load_toml_file for ``strict``.
    """
    path = path or get_default_config_path()
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        mtime = 0.0

    with _file_cache_lock:
        cached = _file_cache.get(path)
        if cached is not None and cached[0] == mtime:
            return cached[1]
        content = load_toml_file(path, strict=strict)
        _file_cache[path] = (mtime, content)
        return content


def clear_config_cache() -> None:
    with _file_cache_lock:
        _file_cache.clear()


def get_config(
    config_path: Path | None = None,
    overrides: ConfigSource | None = None,
    *,
    env: Mapping[str, str] | None = None,
    strict: bool = False,
) -> FFwatchConfig:
    """Build the configuration for this invocation.

    Args:
        config_path: Config file to read instead of the default location.
        overrides: Command-line values, applied last.
        env: Environment to read instead of os.environ.
        strict: Raise TomlParseError for an unparseable config file instead
            of ignoring it.

    Raises:
        TomlParseError: When strict and the config file cannot be parsed.
        ValueError: If the merged values fail validation.
    """
    builder = ConfigBuilder()
    builder.apply(source_from_file(load_config_file(config_path, strict=strict)), "file")
    builder.apply(source_from_env(env), "env")
    if overrides is not None:
        builder.apply(overrides, "cli")

    config = builder.build()
    logger.debug(
        "Resolved config: inactivity_timeout=%s (%s), validate_output=%s (%s)",
        config.supervisor.inactivity_timeout,
        builder.origin_of("inactivity_timeout"),
        config.supervisor.validate_output,
        builder.origin_of("validate_output"),
    )
    return config
