"""Colour specifications used in XPM colour tables."""

from __future__ import annotations

import string

# A small stand-in for rgb.txt: only a handful of basic names.
_KNOWN_COLORS: tuple[tuple[str, int], ...] = (
    ("none", 0x00000000),
    ("black", 0xFF000000),
    ("white", 0xFFFFFFFF),
    ("red", 0xFFFF0000),
    ("green", 0xFF00FF00),
    ("blue", 0xFF0000FF),
)


def _leading_hex(text: str) -> int:
    digits = ""
    for ch in text:
        if ch not in string.hexdigits:
            break
        digits += ch
    return int(digits, 16) if digits else 0


def color_to_argb(spec: str) -> int | None:
    """Convert an XPM colour spec to 0xAARRGGBB, or None if it is not recognised.

    Hex forms #rgb, #rrggbb and #rrrrggggbbbb are accepted.  A name matches the
    first known colour it is a case-insensitive prefix of.
    """
    if spec.startswith("#"):
        if len(spec) == 4:
            buf = "".join(ch * 2 for ch in spec[1:4])
        elif len(spec) == 7:
            buf = spec[1:7]
        elif len(spec) == 13:
            buf = spec[1:3] + spec[5:7] + spec[9:11]
        else:
            return None
        return 0xFF000000 | _leading_hex(buf)

    wanted = spec.lower()
    for name, argb in _KNOWN_COLORS:
        if name.startswith(wanted):
            return argb
    return None