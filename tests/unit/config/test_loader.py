"""Tests for config/loader.py."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ffwatch.config.builder import ConfigSource
from ffwatch.config.loader import (
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from ffwatch.config.toml_parser import TomlParseError


class TestPaths:
    """Tests for data dir and config path resolution."""

    def test_data_dir_from_env(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"FFWATCH_DATA_DIR": str(tmp_path)}):
            assert get_data_dir() == tmp_path

    def test_config_path_env_wins(self, tmp_path: Path) -> None:
        env = {
            "FFWATCH_DATA_DIR": str(tmp_path),
            "FFWATCH_CONFIG_PATH": str(tmp_path / "custom.toml"),
        }
        with patch.dict(os.environ, env):
            assert get_default_config_path() == tmp_path / "custom.toml"

    def test_config_path_under_data_dir(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"FFWATCH_DATA_DIR": str(tmp_path)}):
            os.environ.pop("FFWATCH_CONFIG_PATH", None)
            assert get_default_config_path() == tmp_path / "config.toml"


class TestLoadConfigFile:
    """Tests for load_config_file caching."""

    def test_reloads_after_modification(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[supervisor]\npriority = 1\n")
        assert load_config_file(path)["supervisor"]["priority"] == 1

        path.write_text("[supervisor]\npriority = 2\n")
        os.utime(path, (1_000_000_000, 1_000_000_000))

        assert load_config_file(path)["supervisor"]["priority"] == 2

    def test_unchanged_file_served_from_cache(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[supervisor]\npriority = 1\n")
        load_config_file(path)

        with patch("ffwatch.config.loader.load_toml_file") as mock_load:
            assert load_config_file(path)["supervisor"]["priority"] == 1

        mock_load.assert_not_called()


class TestGetConfig:
    """Tests for get_config precedence."""

    def _write(self, tmp_path: Path, body: str) -> Path:
        path = tmp_path / "config.toml"
        path.write_text(body)
        return path

    def test_defaults_without_sources(self, tmp_path: Path) -> None:
        config = get_config(tmp_path / "missing.toml", env={})

        assert config.supervisor.inactivity_timeout == 300.0
        assert config.ffprobe_path is None

    def test_file_then_env_then_cli(self, tmp_path: Path) -> None:
        path = self._write(
            tmp_path,
            "[supervisor]\ninactivity_timeout = 100\npriority = 5\n"
            "validate_output = false\n",
        )

        config = get_config(
            path,
            ConfigSource(priority=10),
            env={"FFWATCH_INACTIVITY_TIMEOUT": "50"},
        )

        assert config.supervisor.inactivity_timeout == 50.0
        assert config.supervisor.priority == 10
        assert config.supervisor.validate_output is False

    def test_cli_zero_disables_timeout(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, "[supervisor]\ninactivity_timeout = 100\n")

        config = get_config(path, ConfigSource(inactivity_timeout=0), env={})

        assert config.supervisor.inactivity_timeout is None

    def test_cli_logging_overrides_file(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, '[logging]\nlevel = "warning"\nformat = "text"\n')

        config = get_config(path, ConfigSource(log_format="json"), env={})

        assert config.logging.level == "warning"
        assert config.logging.format == "json"

    def test_strict_parse_error(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, "not toml [")

        with pytest.raises(TomlParseError):
            get_config(path, env={}, strict=True)

    def test_invalid_merged_value_raises(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, '[logging]\nlevel = "loud"\n')

        with pytest.raises(ValueError, match="level"):
            get_config(path, env={})
