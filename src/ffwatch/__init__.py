"""ffwatch - supervise long-running FFmpeg transcodes.

Launches an external transcoding command, streams its diagnostic output,
reports normalized progress, kills the process when its output stalls,
and validates the produced artifacts.
"""

from ffwatch.executor import (
    Command,
    EncodedArtifact,
    EncodingFailedError,
    ProcessHungError,
    TranscodeError,
    TranscodeOptions,
    TranscodeSupervisor,
)

__version__ = "0.1.0"

__all__ = [
    "Command",
    "EncodedArtifact",
    "EncodingFailedError",
    "ProcessHungError",
    "TranscodeError",
    "TranscodeOptions",
    "TranscodeSupervisor",
    "__version__",
]
