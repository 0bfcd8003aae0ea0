"""Loader for XV thumbnail images (P7 332)."""

from __future__ import annotations

import re
from typing import BinaryIO

from imgload.surface import ImageError, PixelFormat, Surface, rewind_on_error

_MAX_LINE = 1024
_INT_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _read_line(src: BinaryIO, size: int = _MAX_LINE) -> bytes | None:
    """Read one line without its terminator, dropping carriage returns."""
    line = bytearray()
    while size > 0:
        byte = src.read(1)
        if not byte:
            return None
        if byte == b"\r":
            continue
        if byte == b"\n":
            return bytes(line)
        line += byte
        size -= 1
    return None


def _scan_ints(text: str, count: int) -> list[int]:
    values = [0] * count
    pos = 0
    for i in range(count):
        match = _INT_RE.match(text, pos)
        if match is None:
            break
        values[i] = int(match.group(1))
        pos = match.end()
    return values


def _read_header(src: BinaryIO) -> tuple[int, int]:
    first = _read_line(src)
    if first is None or not first.startswith(b"P7 332"):
        raise ImageError("Unsupported image format")
    while (line := _read_line(src)) is not None:
        if line.startswith(b"#BUILTIN:"):
            break
        if line.startswith(b"#END_OF_COMMENTS"):
            dims = _read_line(src)
            if dims is not None:
                width, height = _scan_ints(dims.decode("latin-1"), 2)
                if width >= 0 and height >= 0:
                    return width, height
            break
    raise ImageError("Unsupported image format")


def is_xv(src: BinaryIO) -> bool:
    """Tell whether the stream holds an XV thumbnail; its position is kept."""
    start = src.tell()
    try:
        _read_header(src)
        return True
    except ImageError:
        return False
    finally:
        src.seek(start)


def load_xv(src: BinaryIO) -> Surface:
    """Load an XV thumbnail as an RGB332 surface."""
    with rewind_on_error(src):
        width, height = _read_header(src)
        pixels: list[int] = []
        for _ in range(height):
            row = src.read(width)
            if row is None or len(row) != width:
                raise ImageError("Couldn't read image data")
            pixels.extend(row)
        return Surface(width, height, PixelFormat.RGB332, pixels)