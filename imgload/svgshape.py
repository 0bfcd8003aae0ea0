"""Vector image model consumed by the SVG rasterizer.

Colours are packed as ``r | g << 8 | b << 16 | a << 24``.  Paths are chains of
cubic Bézier curves: a start point followed by groups of three points (two
control points and an end point) per curve.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional

Point = tuple[float, float]
Segment = tuple[Point, Point, Point, Point]


class PaintType(enum.IntEnum):
    """How a fill or stroke is painted."""

    NONE = 0
    COLOR = 1
    LINEAR_GRADIENT = 2
    RADIAL_GRADIENT = 3


class LineJoin(enum.IntEnum):
    """Shape drawn where two stroked segments meet at a corner."""

    MITER = 0
    ROUND = 1
    BEVEL = 2


class LineCap(enum.IntEnum):
    """Shape drawn at the open ends of a stroked path."""

    BUTT = 0
    ROUND = 1
    SQUARE = 2


class FillRule(enum.IntEnum):
    """Rule deciding which regions of a path are inside."""

    NONZERO = 0
    EVENODD = 1


def _check_color(color: int) -> int:
    if not 0 <= color <= 0xFFFFFFFF:
        raise ValueError(f"colour out of 32-bit range: {color:#x}")
    return color


@dataclass(frozen=True)
class GradientStop:
    """A colour at a position along a gradient."""

    color: int
    offset: float

    def __post_init__(self) -> None:
        _check_color(self.color)


@dataclass(frozen=True)
class Gradient:
    """Gradient stops plus the transform from image space to gradient space.

    ``xform`` is the affine matrix ``(a, b, c, d, e, f)`` mapping a point
    ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``.
    """

    stops: tuple[GradientStop, ...] = ()
    xform: tuple[float, float, float, float, float, float] = (
        1.0, 0.0, 0.0, 1.0, 0.0, 0.0,
    )
    spread: int = 0

    def __post_init__(self) -> None:
        if len(self.xform) != 6:
            raise ValueError("gradient transform needs exactly six values")
        object.__setattr__(self, "stops", tuple(self.stops))
        object.__setattr__(self, "xform", tuple(float(v) for v in self.xform))


@dataclass(frozen=True)
class Paint:
    """A solid colour, a gradient, or nothing."""

    type: PaintType = PaintType.NONE
    color: int = 0
    gradient: Optional[Gradient] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", PaintType(self.type))
        _check_color(self.color)
        is_gradient = self.type in (
            PaintType.LINEAR_GRADIENT,
            PaintType.RADIAL_GRADIENT,
        )
        if is_gradient and self.gradient is None:
            raise ValueError(f"{self.type.name} paint needs a gradient")

    @classmethod
    def solid(cls, color: int) -> "Paint":
        """Return a paint of a single packed RGBA colour."""
        return cls(PaintType.COLOR, color)


@dataclass
class Path:
    """A chain of cubic Bézier curves, optionally closed."""

    points: list[Point]
    closed: bool = False

    def __post_init__(self) -> None:
        self.points = [(float(x), float(y)) for x, y in self.points]
        if not self.points:
            raise ValueError("a path needs at least one point")
        if (len(self.points) - 1) % 3 != 0:
            raise ValueError(
                "a path needs a start point plus three points per curve, "
                f"got {len(self.points)} points"
            )

    def segments(self) -> Iterator[Segment]:
        """Yield each curve as (start, control1, control2, end)."""
        pts = self.points
        for i in range(0, len(pts) - 1, 3):
            yield pts[i], pts[i + 1], pts[i + 2], pts[i + 3]


@dataclass
class Shape:
    """Paths sharing one fill and one stroke style."""

    paths: list[Path] = field(default_factory=list)
    fill: Paint = field(default_factory=Paint)
    stroke: Paint = field(default_factory=Paint)
    opacity: float = 1.0
    stroke_width: float = 1.0
    stroke_dash_offset: float = 0.0
    stroke_dash_array: tuple[float, ...] = ()
    stroke_line_join: LineJoin = LineJoin.MITER
    stroke_line_cap: LineCap = LineCap.BUTT
    miter_limit: float = 4.0
    fill_rule: FillRule = FillRule.NONZERO
    visible: bool = True

    def __post_init__(self) -> None:
        self.stroke_dash_array = tuple(float(v) for v in self.stroke_dash_array)
        if any(v < 0 for v in self.stroke_dash_array):
            raise ValueError("dash lengths must not be negative")
        self.stroke_line_join = LineJoin(self.stroke_line_join)
        self.stroke_line_cap = LineCap(self.stroke_line_cap)
        self.fill_rule = FillRule(self.fill_rule)


@dataclass
class SvgImage:
    """A parsed vector image: its size and shapes drawn in order."""

    width: float
    height: float
    shapes: list[Shape] = field(default_factory=list)