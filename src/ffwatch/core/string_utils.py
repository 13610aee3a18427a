"""String utilities for external tool output.

FFmpeg writes whatever bytes the container metadata holds to stderr, so
diagnostic records are not guaranteed to be valid UTF-8. Decoding here never
raises: bytes that fail the trial decode are reinterpreted under a fixed
single-byte encoding, which maps every byte value to a character.
"""

from __future__ import annotations

PRIMARY_ENCODING = "utf-8"
FALLBACK_ENCODING = "iso-8859-1"


def decode_with_fallback(data: bytes) -> str:
    """Decode tool output, falling back to ISO-8859-1 on invalid bytes.

    Args:
        data: Raw bytes read from a subprocess stream.

    Returns:
        Decoded text. Never raises for encoding reasons.

    Example:
        >>> decode_with_fallback(b"frame= 10")
        'frame= 10'
        >>> decode_with_fallback(b"title=\\xe9t\\xe9")
        'title=été'
    """
    try:
        return data.decode(PRIMARY_ENCODING)
    except UnicodeDecodeError:
        return data.decode(FALLBACK_ENCODING)
