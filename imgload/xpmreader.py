"""Line reading and header/colour-table parsing for XPM images."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Sequence, Union

from imgload.surface import ImageError
from imgload.xpmcolors import color_to_argb

_HEADER_RE = re.compile(
    r"[ \t\n\v\f\r]*([+-]?\d+)"
    r"[ \t\n\v\f\r]*([+-]?\d+)"
    r"[ \t\n\v\f\r]*([+-]?\d+)"
    r"[ \t\n\v\f\r]*([+-]?\d+)"
)
_TOKEN_RE = re.compile(r"[^ \t\n\v\f\r]+")

XpmSource = Union[Sequence[str], BinaryIO]


@dataclass(frozen=True)
class XpmHeader:
    """The values line of an XPMv3 image."""

    width: int
    height: int
    ncolors: int
    cpp: int


def parse_header(line: str) -> XpmHeader:
    """Parse '<width> <height> <ncolors> <cpp> [hotspot]'; hotspots are ignored."""
    match = _HEADER_RE.match(line)
    if match is None:
        raise ImageError("Invalid format description")
    width, height, ncolors, cpp = (int(g) for g in match.groups())
    if width <= 0 or height <= 0 or ncolors <= 0 or cpp <= 0:
        raise ImageError("Invalid format description")
    return XpmHeader(width, height, ncolors, cpp)


def _definition_pairs(text: str) -> Iterator[tuple[str, str]]:
    tokens = _TOKEN_RE.findall(text)
    for i in range(0, len(tokens), 2):
        nametype = tokens[i]
        colname = tokens[i + 1] if i + 1 < len(tokens) else ""
        yield nametype, colname


def parse_color_definition(line: str, cpp: int) -> tuple[str, int]:
    """Return the pixel key and 0xAARRGGBB colour of one colour-table line.

    Symbolic ('s') names are skipped, as are colours that cannot be
    recognised; the first usable definition wins.
    """
    for nametype, colname in _definition_pairs(line[cpp + 1:]):
        if nametype.startswith("s"):
            continue
        argb = color_to_argb(colname)
        if argb is None:
            continue
        return line[:cpp], argb
    raise ImageError("colour parse error")


class XpmLineReader:
    """Yields the quoted strings of an XPM image from an array or a byte stream."""

    def __init__(self, source: XpmSource) -> None:
        if hasattr(source, "read"):
            self._stream: BinaryIO | None = source  # type: ignore[assignment]
            self._lines: Iterator[str] | None = None
        else:
            self._stream = None
            self._lines = iter(source)  # type: ignore[arg-type]

    def _read(self, count: int) -> bytes:
        assert self._stream is not None
        data = self._stream.read(count)
        if data is None or len(data) != count:
            raise ImageError("Premature end of data")
        return data

    def next_line(self, length: int = 0) -> str:
        """Return the next string.

        When reading a stream and length is positive, the string is taken to
        be exactly that long and is read in one piece, along with its closing
        quote, comma and line break.
        """
        if self._lines is not None:
            try:
                return next(self._lines)
            except StopIteration:
                raise ImageError("Premature end of data") from None

        while self._read(1) != b'"':
            pass
        if length > 0:
            data = self._read(length + 3)
            return data[:length].decode("latin-1")
        chars = bytearray()
        while True:
            byte = self._read(1)
            if byte == b'"':
                break
            chars += byte
        return chars.decode("latin-1")