"""Media inspection collaborators (duration lookup, output validation)."""

from ffwatch.introspector.ffprobe import FFprobeIntrospector
from ffwatch.introspector.interface import MediaIntrospectionError, MediaValidator

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospectionError",
    "MediaValidator",
]
