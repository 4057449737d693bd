"""Length-prefixed string buffers for hosts that call the renderer across a byte boundary.

A framed string is a 4-byte little-endian length (in UTF-16 code units)
followed by one byte per code unit. Only the low byte of each unit is kept,
so characters above U+00FF do not survive the trip.
"""
from __future__ import annotations

import struct

from .aasvg import render

_LENGTH = struct.Struct("<I")


class FramingError(ValueError):
    """Raised when a buffer is too short for its length prefix or payload."""


def pack_string(text: str) -> bytes:
    units = text.encode("utf-16-le", "surrogatepass")
    payload = units[0::2]
    return _LENGTH.pack(len(payload)) + payload


def unpack_string(buffer: bytes, offset: int = 0) -> str:
    end_of_prefix = offset + _LENGTH.size
    if offset < 0 or len(buffer) < end_of_prefix:
        raise FramingError(f"buffer too short for length prefix at offset {offset}")
    (length,) = _LENGTH.unpack_from(buffer, offset)
    end = end_of_prefix + length
    if len(buffer) < end:
        raise FramingError(
            f"buffer declares {length} bytes but only {len(buffer) - end_of_prefix} follow"
        )
    return bytes(buffer[end_of_prefix:end]).decode("latin-1")


def render_buffer(buffer: bytes) -> bytes:
    return pack_string(render(unpack_string(buffer)))


__all__ = ["FramingError", "pack_string", "render_buffer", "unpack_string"]
