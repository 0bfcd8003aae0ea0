"""Loader for XPM (X PixMap, version 3) images."""

from __future__ import annotations

from typing import BinaryIO, Sequence

from imgload.surface import Color, ImageError, PixelFormat, Surface, rewind_on_error
from imgload.xpmreader import (
    XpmLineReader,
    XpmSource,
    parse_color_definition,
    parse_header,
)

_MAGIC = b"/* XPM */"
_MAX_INDEXED_COLORS = 256


def is_xpm(src: BinaryIO) -> bool:
    """Tell whether the stream starts with the XPM magic; its position is kept."""
    start = src.tell()
    try:
        return src.read(len(_MAGIC)) == _MAGIC
    finally:
        src.seek(start)


def _argb_to_color(argb: int) -> Color:
    return Color(
        r=(argb >> 16) & 0xFF,
        g=(argb >> 8) & 0xFF,
        b=argb & 0xFF,
        a=(argb >> 24) & 0xFF,
    )


def _decode(source: XpmSource, force_32bit: bool) -> Surface:
    reader = XpmLineReader(source)
    header = parse_header(reader.next_line())
    width, height, ncolors, cpp = (
        header.width,
        header.height,
        header.ncolors,
        header.cpp,
    )
    indexed = ncolors <= _MAX_INDEXED_COLORS and not force_32bit

    palette: list[Color] = []
    color_key: int | None = None
    lookup: dict[str, int] = {}
    for index in range(ncolors):
        key, argb = parse_color_definition(reader.next_line(), cpp)
        if indexed:
            palette.append(_argb_to_color(argb))
            pixel = index
            if argb == 0x00000000:
                color_key = pixel
        else:
            pixel = argb
        # A later definition of the same key takes precedence.
        lookup[key] = pixel

    pixels: list[int] = []
    row_len = width * cpp
    for _ in range(height):
        line = reader.next_line(row_len)
        pixels.extend(
            lookup.get(line[x * cpp:(x + 1) * cpp], 0) for x in range(width)
        )

    if indexed:
        return Surface(
            width,
            height,
            PixelFormat.INDEX8,
            pixels,
            palette=palette,
            color_key=color_key,
        )
    return Surface(width, height, PixelFormat.ARGB8888, pixels)


def load_xpm(src: BinaryIO) -> Surface:
    """Load an XPM image from a byte stream.

    The result is an INDEX8 surface when the image has at most 256 colours,
    otherwise ARGB8888.  On failure the stream position is restored.
    """
    with rewind_on_error(src):
        return _decode(src, force_32bit=False)


def _check_array(xpm: Sequence[str] | None) -> Sequence[str]:
    if xpm is None:
        raise ImageError("array is NULL")
    return xpm


def read_xpm_from_array(xpm: Sequence[str]) -> Surface:
    """Read an XPM image held as a sequence of strings (indexed if possible)."""
    return _decode(_check_array(xpm), force_32bit=False)


def read_xpm_from_array_to_rgb888(xpm: Sequence[str]) -> Surface:
    """Read an XPM image held as a sequence of strings, always as ARGB8888."""
    return _decode(_check_array(xpm), force_32bit=True)