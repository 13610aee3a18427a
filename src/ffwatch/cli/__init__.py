"""CLI module for ffwatch."""

import logging
import sys
from pathlib import Path

import click

from ffwatch.cli.exit_codes import ExitCode

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
        config_path: Config file to read the base logging settings from.
    """
    global _logging_configured
    if _logging_configured:
        return

    from ffwatch.config import ConfigSource, get_config
    from ffwatch.logging import configure_logging

    overrides = ConfigSource(
        log_level=log_level,
        log_file=log_file,
        log_format="json" if log_json else None,
    )
    try:
        config = get_config(config_path, overrides)
    except ValueError as e:
        click.echo(f"Error: Invalid logging configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)
    _logging_configured = True


@click.group()
@click.version_option(package_name="ffwatch")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.ffwatch/config.toml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """ffwatch - Supervise long-running FFmpeg transcodes."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    _configure_logging(log_level, log_file, log_json, config_path)


# Defer import to avoid circular dependency
def _register_commands():
    from ffwatch.cli.run import run_cmd

    main.add_command(run_cmd)


_register_commands()
