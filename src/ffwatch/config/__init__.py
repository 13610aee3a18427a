"""Configuration management for ffwatch.

Settings are layered: CLI flags over FFWATCH_* environment variables over
the TOML config file over defaults.
"""

from ffwatch.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from ffwatch.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from ffwatch.config.models import (
    DEFAULT_INACTIVITY_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    FFwatchConfig,
    LoggingConfig,
    SupervisorConfig,
)
from ffwatch.config.toml_parser import TomlParseError, load_toml_file

__all__ = [
    # Models
    "DEFAULT_INACTIVITY_TIMEOUT",
    "DEFAULT_POLL_INTERVAL",
    "FFwatchConfig",
    "LoggingConfig",
    "SupervisorConfig",
    # Loading
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    "load_toml_file",
    "TomlParseError",
    # Layering
    "ConfigBuilder",
    "ConfigSource",
    "source_from_env",
    "source_from_file",
]
