"""In-memory surfaces produced by the image loaders."""

from __future__ import annotations

import contextlib
import enum
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator


class ImageError(Exception):
    """Raised when image data cannot be recognised or decoded."""


class PixelFormat(enum.Enum):
    """Layout of a single pixel value stored in a surface."""

    INDEX8 = "index8"
    """Palette index, one byte per pixel."""
    RGB332 = "rgb332"
    """Packed 3-3-2 bit red, green and blue."""
    ARGB8888 = "argb8888"
    """Packed integer 0xAARRGGBB."""
    RGBA32 = "rgba32"
    """Bytes R, G, B, A in memory order, packed as r | g<<8 | b<<16 | a<<24."""


@dataclass(frozen=True)
class Color:
    """An RGBA colour with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b, self.a):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")


def _expand3(value: int) -> int:
    return value * 255 // 7


def _expand2(value: int) -> int:
    return value * 85


@dataclass
class Surface:
    """A rectangular grid of pixels stored row by row, one integer per pixel."""

    width: int
    height: int
    format: PixelFormat
    pixels: list[int] = field(default_factory=list)
    palette: list[Color] = field(default_factory=list)
    color_key: int | None = None

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"invalid surface size {self.width}x{self.height}")
        count = self.width * self.height
        if not self.pixels:
            self.pixels = [0] * count
        elif len(self.pixels) != count:
            raise ValueError(
                f"expected {count} pixels, got {len(self.pixels)}"
            )

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside surface")

    def pixel(self, x: int, y: int) -> int:
        """Return the raw pixel value at column x, row y."""
        self._check(x, y)
        return self.pixels[y * self.width + x]

    def row(self, y: int) -> list[int]:
        """Return a copy of the raw pixel values of row y."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside surface")
        start = y * self.width
        return self.pixels[start:start + self.width]

    def _decode(self, value: int) -> tuple[int, int, int, int]:
        fmt = self.format
        if fmt is PixelFormat.INDEX8:
            if value >= len(self.palette):
                raise ImageError(f"pixel index {value} outside palette")
            c = self.palette[value]
            alpha = 0 if self.color_key == value else c.a
            return c.r, c.g, c.b, alpha
        if fmt is PixelFormat.RGB332:
            r = _expand3((value >> 5) & 0x07)
            g = _expand3((value >> 2) & 0x07)
            b = _expand2(value & 0x03)
            alpha = 0 if self.color_key == value else 255
            return r, g, b, alpha
        if fmt is PixelFormat.ARGB8888:
            alpha = 0 if self.color_key == value else (value >> 24) & 0xFF
            return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF, alpha
        return value & 0xFF, (value >> 8) & 0xFF, (value >> 16) & 0xFF, (value >> 24) & 0xFF

    def to_rgba(self) -> bytes:
        """Return the image as RGBA bytes, row by row, honouring the colour key."""
        out = bytearray()
        for value in self.pixels:
            out.extend(self._decode(value))
        return bytes(out)


@contextlib.contextmanager
def rewind_on_error(src: BinaryIO) -> Iterator[int]:
    """Remember the stream position and restore it if the block raises."""
    start = src.tell()
    try:
        yield start
    except BaseException:
        src.seek(start)
        raise