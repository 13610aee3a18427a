"""Core utilities shared across ffwatch."""

from ffwatch.core.string_utils import (
    FALLBACK_ENCODING,
    PRIMARY_ENCODING,
    decode_with_fallback,
)

__all__ = [
    "FALLBACK_ENCODING",
    "PRIMARY_ENCODING",
    "decode_with_fallback",
]
