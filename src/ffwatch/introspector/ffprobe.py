"""FFprobe-based media inspection.

Provides the two facts a supervised transcode needs from its collaborators:
the input duration (to normalize progress) and whether an output artifact
is valid media.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path
from typing import Any

from ffwatch.introspector.interface import MediaIntrospectionError

logger = logging.getLogger(__name__)

_MEDIA_STREAM_TYPES = frozenset(("video", "audio"))


class FFprobeIntrospector:
    """ffprobe-based implementation of the MediaValidator protocol.

    Supports configured ffprobe paths via the ffwatch configuration system.
    """

    PROBE_TIMEOUT: int = 60

    def __init__(self, ffprobe_path: Path | None = None) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the configured path or the system PATH.

        Raises:
            MediaIntrospectionError: If ffprobe is not available.
        """
        self._ffprobe_path = ffprobe_path or self._get_configured_path()

        if self._ffprobe_path is None:
            raise MediaIntrospectionError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg, or configure a custom path via the "
                "FFWATCH_FFPROBE_PATH environment variable or "
                "~/.ffwatch/config.toml"
            )

    @staticmethod
    def _get_configured_path() -> Path | None:
        """Get ffprobe path from configuration, falling back to PATH.

        Returns:
            Path to ffprobe or None if not available.
        """
        from ffwatch.config import get_config

        configured = get_config().ffprobe_path
        if configured is not None:
            return configured if configured.exists() else None
        found = shutil.which("ffprobe")
        return Path(found) if found else None

    def probe(self, path: Path) -> dict[str, Any]:
        """Run ffprobe and return its parsed JSON output.

        Args:
            path: Path to the media file.

        Returns:
            Parsed ffprobe output with "streams" and "format" keys.

        Raises:
            MediaIntrospectionError: If the file is missing, ffprobe fails or
                times out, or the output is not usable.
        """
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        args = [
            str(self._ffprobe_path),
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            "-show_format",
            str(path),
        ]
        logger.debug("Probing %s", path)
        try:
            result = subprocess.run(  # nosec B603 - ffprobe path is validated
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.PROBE_TIMEOUT,
            )
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"Could not run ffprobe: {e}") from e

        if result.returncode != 0:
            detail = result.stderr.strip() or result.returncode
            raise MediaIntrospectionError(f"ffprobe failed for {path}: {detail}")

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise MediaIntrospectionError(
                f"Invalid ffprobe output for {path}: {e}"
            ) from e

        if "streams" not in data or "format" not in data:
            raise MediaIntrospectionError(
                f"Missing 'streams' or 'format' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        return data

    def get_duration(self, path: Path) -> float:
        """Get the container duration of a media file in seconds.

        Raises:
            MediaIntrospectionError: If the file cannot be probed or reports
                no duration.
        """
        data = self.probe(path)
        raw = data["format"].get("duration")
        try:
            return float(raw)
        except (TypeError, ValueError) as e:
            raise MediaIntrospectionError(
                f"No duration reported for {path}: {raw!r}"
            ) from e

    def is_valid(self, path: Path) -> bool:
        """Check whether a file parses as media with an audio or video stream.

        Probe failures are reported as invalid rather than raised.
        """
        try:
            data = self.probe(path)
        except MediaIntrospectionError as e:
            logger.debug("Treating %s as invalid media: %s", path, e)
            return False

        return any(
            stream.get("codec_type") in _MEDIA_STREAM_TYPES
            for stream in data["streams"]
        )
