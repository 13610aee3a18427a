"""CLI run command for ffwatch."""

import logging
import sys
from pathlib import Path

import click

from ffwatch.cli.exit_codes import ExitCode
from ffwatch.config import ConfigSource, TomlParseError, get_config
from ffwatch.executor import (
    Command,
    EncodedArtifact,
    EncodingFailedError,
    ProcessHungError,
    TranscodeOptions,
    TranscodeSupervisor,
)
from ffwatch.introspector import FFprobeIntrospector, MediaIntrospectionError

logger = logging.getLogger(__name__)


def _echo_progress(fraction: float) -> None:
    """Rewrite a single progress line on stderr."""
    click.echo(f"\rProgress: {fraction:7.1%}", nl=False, err=True)


def _get_introspector(ffprobe_path: Path | None) -> FFprobeIntrospector:
    try:
        return FFprobeIntrospector(ffprobe_path)
    except MediaIntrospectionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)


@click.command("run")
@click.argument("command")
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Output file the command writes. With --count, a %d-style pattern.",
)
@click.option(
    "--duration",
    type=click.FloatRange(min=0.0, min_open=True),
    default=None,
    help="Input duration in seconds, used to compute progress.",
)
@click.option(
    "--probe",
    "probe_input",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Read the input duration from this file with ffprobe.",
)
@click.option(
    "--count",
    type=click.IntRange(min=1),
    default=None,
    help="Number of numbered artifacts the command produces (e.g. thumbnails).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0.0),
    default=None,
    help="Seconds without output before the process is killed (default: 300).",
)
@click.option(
    "--no-timeout",
    is_flag=True,
    default=False,
    help="Never kill the process for inactivity.",
)
@click.option(
    "--no-validate",
    is_flag=True,
    default=False,
    help="Skip output validation; the exit status is only logged.",
)
@click.option(
    "--priority",
    type=click.IntRange(-20, 19),
    default=None,
    help="Run the command with this niceness (POSIX only).",
)
@click.pass_context
def run_cmd(
    ctx: click.Context,
    command: str,
    output_path: Path | None,
    duration: float | None,
    probe_input: Path | None,
    count: int | None,
    timeout: float | None,
    no_timeout: bool,
    no_validate: bool,
    priority: int | None,
) -> None:
    """Run COMMAND under supervision.

    COMMAND is a complete, shell-escaped transcoder command line. Its stderr
    is parsed for FFmpeg status records to report progress, and the process
    is killed if it stops writing for longer than the inactivity timeout.

    Examples:

        ffwatch run "ffmpeg -i in.mkv out.mp4" --probe in.mkv -o out.mp4

        ffwatch run "ffmpeg -i in.mkv -vf fps=1/60 th_%03d.jpg" \\
            -o th_%03d.jpg --count 10 --duration 600
    """
    if timeout is not None and no_timeout:
        raise click.UsageError("--timeout and --no-timeout are mutually exclusive")
    if duration is not None and probe_input is not None:
        raise click.UsageError("--duration and --probe are mutually exclusive")

    obj = ctx.obj or {}
    try:
        config = get_config(
            obj.get("config_path"),
            ConfigSource(
                inactivity_timeout=0 if no_timeout else timeout,
                validate_output=False if no_validate else None,
                priority=priority,
            ),
            strict=True,
        )
    except (TomlParseError, ValueError) as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        options = TranscodeOptions(output_path=output_path, artifact_count=count)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    introspector: FFprobeIntrospector | None = None
    if probe_input is not None:
        if not probe_input.exists():
            click.echo(f"Error: File not found: {probe_input}", err=True)
            sys.exit(ExitCode.TARGET_NOT_FOUND)
        introspector = _get_introspector(config.ffprobe_path)
        try:
            duration = introspector.get_duration(probe_input)
        except MediaIntrospectionError as e:
            click.echo(f"Error: Could not read duration: {e}", err=True)
            sys.exit(ExitCode.OPERATION_FAILED)

    validate = config.supervisor.validate_output
    if validate and output_path is None:
        raise click.UsageError("--output is required unless --no-validate is given")
    if validate and not options.is_multi_artifact:
        validator = introspector or _get_introspector(config.ffprobe_path)
        options = TranscodeOptions(output_path=output_path, validator=validator)

    supervisor = TranscodeSupervisor(
        Command(command, priority=config.supervisor.priority),
        total_duration=duration,
        options=options,
        config=config.supervisor,
    )

    try:
        result = supervisor.run(_echo_progress)
    except ProcessHungError:
        click.echo("", err=True)
        click.echo(
            f"Error: Process produced no output for "
            f"{config.supervisor.inactivity_timeout}s and was killed.",
            err=True,
        )
        sys.exit(ExitCode.PROCESS_HUNG)
    except EncodingFailedError as e:
        click.echo("", err=True)
        click.echo(f"Error: Failed encoding: {', '.join(e.reasons)}", err=True)
        if e.exit_code is not None:
            click.echo(f"Command exited with status {e.exit_code}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)
    except OSError as e:
        click.echo(f"Error: Could not start command: {e}", err=True)
        sys.exit(ExitCode.GENERAL_ERROR)
    except KeyboardInterrupt:
        click.echo("", err=True)
        click.echo("Interrupted, transcoder killed.", err=True)
        sys.exit(ExitCode.INTERRUPTED)

    click.echo("", err=True)
    if isinstance(result, EncodedArtifact):
        click.echo(f"Created {result.path} ({result.size} bytes)")
    elif result is True:
        click.echo(f"Created {count} artifacts")
    else:
        click.echo("Finished (output not validated)")
