"""Media inspection interfaces used around a supervised transcode."""

from pathlib import Path
from typing import Protocol


class MediaIntrospectionError(Exception):
    """Raised when media introspection fails."""

    pass


class MediaValidator(Protocol):
    """Protocol for checking that a produced artifact is usable media.

    The supervisor only asks one question of its validator after a run;
    how the answer is reached (ffprobe, mediainfo, a stub in tests) is up
    to the implementation.
    """

    def is_valid(self, path: Path) -> bool:
        """Check whether the file at path is structurally valid media.

        Args:
            path: Path to the produced artifact.

        Returns:
            True if the file can be parsed as media with at least one
            audio or video stream.
        """
        ...
