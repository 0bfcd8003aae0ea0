"""Turning shapes into polygon edges: path flattening and stroke expansion.

Curves are subdivided until flat within a tolerance.  Fills become the
polygon outline of each path.  Strokes become the outline of the stroked
region, including caps, joins and dashes.  Edges are oriented so that
``y0 < y1``.  ``dir`` records whether the original edge pointed down (1) or
up (-1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterator

from imgload.svgshape import LineCap, LineJoin, Path, Shape

_CORNER = 0x01
_BEVEL = 0x02
_LEFT = 0x04

_MAX_LEVEL = 10

XY = tuple[float, float]


@dataclass
class Edge:
    """A non-horizontal polygon edge with y0 < y1 and its winding direction."""

    x0: float
    y0: float
    x1: float
    y1: float
    dir: int


@dataclass
class PathPoint:
    """A point of a flattened path with the data used to stroke it."""

    x: float
    y: float
    flags: int = 0
    dx: float = 0.0
    dy: float = 0.0
    length: float = 0.0
    dmx: float = 0.0
    dmy: float = 0.0


def _normalize(x: float, y: float) -> tuple[float, float, float]:
    d = math.sqrt(x * x + y * y)
    if d > 1e-6:
        x /= d
        y /= d
    return x, y, d


def _curve_divs(radius: float, arc: float, tol: float) -> int:
    da = math.acos(radius / (radius + tol)) * 2.0
    return max(2, math.ceil(arc / da))


def _pairs(points: list[PathPoint]) -> Iterator[tuple[PathPoint, PathPoint]]:
    """Yield (previous, current) around the closed loop, starting at the first point."""
    return zip(points[-1:] + points[:-1], points)


class EdgeBuilder:
    """Accumulates edges from shapes flattened with the given tolerances."""

    def __init__(self, tess_tol: float = 0.25, dist_tol: float = 0.01) -> None:
        self.tess_tol = tess_tol
        self.dist_tol = dist_tol
        self.edges: list[Edge] = []
        self.points: list[PathPoint] = []

    # -- primitives -------------------------------------------------------

    def add_edge(self, x0: float, y0: float, x1: float, y1: float) -> None:
        """Add an edge, skipping horizontal ones and orienting it downwards."""
        if y0 == y1:
            return
        if y0 < y1:
            self.edges.append(Edge(x0, y0, x1, y1, 1))
        else:
            self.edges.append(Edge(x1, y1, x0, y0, -1))

    def _pt_equals(self, x1: float, y1: float, x2: float, y2: float) -> bool:
        dx = x2 - x1
        dy = y2 - y1
        return dx * dx + dy * dy < self.dist_tol * self.dist_tol

    def _add_path_point(self, x: float, y: float, flags: int) -> None:
        if self.points:
            last = self.points[-1]
            if self._pt_equals(last.x, last.y, x, y):
                last.flags |= flags
                return
        self.points.append(PathPoint(x, y, flags))

    def _flatten_cubic(
        self,
        x1: float, y1: float, x2: float, y2: float,
        x3: float, y3: float, x4: float, y4: float,
        level: int, kind: int,
    ) -> None:
        if level > _MAX_LEVEL:
            return
        x12, y12 = (x1 + x2) * 0.5, (y1 + y2) * 0.5
        x23, y23 = (x2 + x3) * 0.5, (y2 + y3) * 0.5
        x34, y34 = (x3 + x4) * 0.5, (y3 + y4) * 0.5
        x123, y123 = (x12 + x23) * 0.5, (y12 + y23) * 0.5

        dx = x4 - x1
        dy = y4 - y1
        d2 = abs((x2 - x4) * dy - (y2 - y4) * dx)
        d3 = abs((x3 - x4) * dy - (y3 - y4) * dx)

        if (d2 + d3) * (d2 + d3) < self.tess_tol * (dx * dx + dy * dy):
            self._add_path_point(x4, y4, kind)
            return
        level += 1
        if level > _MAX_LEVEL:
            return

        x234, y234 = (x23 + x34) * 0.5, (y23 + y34) * 0.5
        x1234, y1234 = (x123 + x234) * 0.5, (y123 + y234) * 0.5

        self._flatten_cubic(x1, y1, x12, y12, x123, y123, x1234, y1234, level, 0)
        self._flatten_cubic(x1234, y1234, x234, y234, x34, y34, x4, y4, level, kind)

    def _flatten_path(self, path: Path, scale: float, flags: int) -> None:
        self.points = []
        sx, sy = path.points[0]
        self._add_path_point(sx * scale, sy * scale, flags)
        for (ax, ay), (bx, by), (cx, cy), (dx, dy) in path.segments():
            self._flatten_cubic(
                ax * scale, ay * scale, bx * scale, by * scale,
                cx * scale, cy * scale, dx * scale, dy * scale,
                0, flags,
            )

    # -- fills ------------------------------------------------------------

    def flatten_fill(self, shape: Shape, scale: float) -> list[Edge]:
        """Add the closed polygon edges of every path of the shape."""
        for path in shape.paths:
            self._flatten_path(path, scale, 0)
            sx, sy = path.points[0]
            self._add_path_point(sx * scale, sy * scale, 0)
            for prev, cur in _pairs(self.points):
                self.add_edge(prev.x, prev.y, cur.x, cur.y)
        return self.edges

    # -- caps ---------------------------------------------------------------

    def _butt_cap(self, left: XY, right: XY, p: PathPoint, dx: float, dy: float,
                  width: float, connect: bool) -> tuple[XY, XY]:
        w = width * 0.5
        return self._flat_cap(left, right, p.x, p.y, dx, dy, w, connect)

    def _square_cap(self, left: XY, right: XY, p: PathPoint, dx: float, dy: float,
                    width: float, connect: bool) -> tuple[XY, XY]:
        w = width * 0.5
        return self._flat_cap(left, right, p.x - dx * w, p.y - dy * w, dx, dy, w, connect)

    def _flat_cap(self, left: XY, right: XY, px: float, py: float, dx: float,
                  dy: float, w: float, connect: bool) -> tuple[XY, XY]:
        dlx, dly = dy, -dx
        lx, ly = px - dlx * w, py - dly * w
        rx, ry = px + dlx * w, py + dly * w
        self.add_edge(lx, ly, rx, ry)
        if connect:
            self.add_edge(left[0], left[1], lx, ly)
            self.add_edge(rx, ry, right[0], right[1])
        return (lx, ly), (rx, ry)

    def _round_cap(self, left: XY, right: XY, p: PathPoint, dx: float, dy: float,
                   width: float, ncap: int, connect: bool) -> tuple[XY, XY]:
        w = width * 0.5
        px, py = p.x, p.y
        dlx, dly = dy, -dx
        lx = ly = rx = ry = prevx = prevy = 0.0
        for i in range(ncap):
            a = i / (ncap - 1) * math.pi
            ax, ay = math.cos(a) * w, math.sin(a) * w
            x = px - dlx * ax - dx * ay
            y = py - dly * ax - dy * ay
            if i > 0:
                self.add_edge(prevx, prevy, x, y)
            prevx, prevy = x, y
            if i == 0:
                lx, ly = x, y
            elif i == ncap - 1:
                rx, ry = x, y
        if connect:
            self.add_edge(left[0], left[1], lx, ly)
            self.add_edge(rx, ry, right[0], right[1])
        return (lx, ly), (rx, ry)

    def _cap(self, cap: LineCap, left: XY, right: XY, p: PathPoint, dx: float,
             dy: float, width: float, ncap: int, connect: bool) -> tuple[XY, XY]:
        if cap is LineCap.BUTT:
            return self._butt_cap(left, right, p, dx, dy, width, connect)
        if cap is LineCap.SQUARE:
            return self._square_cap(left, right, p, dx, dy, width, connect)
        return self._round_cap(left, right, p, dx, dy, width, ncap, connect)

    # -- joins --------------------------------------------------------------

    def _bevel_join(self, left: XY, right: XY, p0: PathPoint, p1: PathPoint,
                    width: float) -> tuple[XY, XY]:
        w = width * 0.5
        dlx0, dly0 = p0.dy, -p0.dx
        dlx1, dly1 = p1.dy, -p1.dx
        lx0, ly0 = p1.x - dlx0 * w, p1.y - dly0 * w
        rx0, ry0 = p1.x + dlx0 * w, p1.y + dly0 * w
        lx1, ly1 = p1.x - dlx1 * w, p1.y - dly1 * w
        rx1, ry1 = p1.x + dlx1 * w, p1.y + dly1 * w

        self.add_edge(lx0, ly0, left[0], left[1])
        self.add_edge(lx1, ly1, lx0, ly0)
        self.add_edge(right[0], right[1], rx0, ry0)
        self.add_edge(rx0, ry0, rx1, ry1)
        return (lx1, ly1), (rx1, ry1)

    def _miter_join(self, left: XY, right: XY, p0: PathPoint, p1: PathPoint,
                    width: float) -> tuple[XY, XY]:
        w = width * 0.5
        dlx0, dly0 = p0.dy, -p0.dx
        dlx1, dly1 = p1.dy, -p1.dx

        if p1.flags & _LEFT:
            lx1, ly1 = p1.x - p1.dmx * w, p1.y - p1.dmy * w
            self.add_edge(lx1, ly1, left[0], left[1])
            rx0, ry0 = p1.x + dlx0 * w, p1.y + dly0 * w
            rx1, ry1 = p1.x + dlx1 * w, p1.y + dly1 * w
            self.add_edge(right[0], right[1], rx0, ry0)
            self.add_edge(rx0, ry0, rx1, ry1)
        else:
            lx0, ly0 = p1.x - dlx0 * w, p1.y - dly0 * w
            lx1, ly1 = p1.x - dlx1 * w, p1.y - dly1 * w
            self.add_edge(lx0, ly0, left[0], left[1])
            self.add_edge(lx1, ly1, lx0, ly0)
            rx1, ry1 = p1.x + p1.dmx * w, p1.y + p1.dmy * w
            self.add_edge(right[0], right[1], rx1, ry1)
        return (lx1, ly1), (rx1, ry1)

    def _round_join(self, left: XY, right: XY, p0: PathPoint, p1: PathPoint,
                    width: float, ncap: int) -> tuple[XY, XY]:
        w = width * 0.5
        dlx0, dly0 = p0.dy, -p0.dx
        dlx1, dly1 = p1.dy, -p1.dx
        a0 = math.atan2(dly0, dlx0)
        a1 = math.atan2(dly1, dlx1)
        da = a1 - a0
        if da < math.pi:
            da += math.pi * 2
        if da > math.pi:
            da -= math.pi * 2

        n = math.ceil((abs(da) / math.pi) * ncap)
        n = min(max(n, 2), ncap)

        lx, ly = left
        rx, ry = right
        for i in range(n):
            u = i / (n - 1)
            a = a0 + u * da
            ax, ay = math.cos(a) * w, math.sin(a) * w
            lx1, ly1 = p1.x - ax, p1.y - ay
            rx1, ry1 = p1.x + ax, p1.y + ay
            self.add_edge(lx1, ly1, lx, ly)
            self.add_edge(rx, ry, rx1, ry1)
            lx, ly = lx1, ly1
            rx, ry = rx1, ry1
        return (lx, ly), (rx, ry)

    def _straight_join(self, left: XY, right: XY, p1: PathPoint,
                       width: float) -> tuple[XY, XY]:
        w = width * 0.5
        lx, ly = p1.x - p1.dmx * w, p1.y - p1.dmy * w
        rx, ry = p1.x + p1.dmx * w, p1.y + p1.dmy * w
        self.add_edge(lx, ly, left[0], left[1])
        self.add_edge(right[0], right[1], rx, ry)
        return (lx, ly), (rx, ry)

    # -- strokes --------------------------------------------------------------

    def _prepare_stroke(self, miter_limit: float, line_join: LineJoin) -> None:
        points = self.points
        for p0, p1 in _pairs(points):
            p0.dx, p0.dy, p0.length = _normalize(p1.x - p0.x, p1.y - p0.y)

        for p0, p1 in _pairs(points):
            dlx0, dly0 = p0.dy, -p0.dx
            dlx1, dly1 = p1.dy, -p1.dx
            p1.dmx = (dlx0 + dlx1) * 0.5
            p1.dmy = (dly0 + dly1) * 0.5
            dmr2 = p1.dmx * p1.dmx + p1.dmy * p1.dmy
            if dmr2 > 0.000001:
                s2 = min(1.0 / dmr2, 600.0)
                p1.dmx *= s2
                p1.dmy *= s2

            p1.flags = _CORNER if p1.flags & _CORNER else 0

            cross = p1.dx * p0.dy - p0.dx * p1.dy
            if cross > 0.0:
                p1.flags |= _LEFT

            if p1.flags & _CORNER:
                if (dmr2 * miter_limit * miter_limit < 1.0
                        or line_join in (LineJoin.BEVEL, LineJoin.ROUND)):
                    p1.flags |= _BEVEL

    def _expand_stroke(self, points: list[PathPoint], closed: bool,
                       line_join: LineJoin, line_cap: LineCap,
                       width: float) -> None:
        ncap = _curve_divs(width * 0.5, math.pi, self.tess_tol)
        npoints = len(points)
        left: XY = (0.0, 0.0)
        right: XY = (0.0, 0.0)
        first_left: XY = (0.0, 0.0)
        first_right: XY = (0.0, 0.0)

        if closed:
            p0 = points[npoints - 1]
            i1 = 0
            start, end = 0, npoints
        else:
            p0 = points[0]
            i1 = 1
            start, end = 1, npoints - 1
        p1 = points[i1]

        if closed:
            w = width * 0.5
            dx, dy, length = _normalize(p1.x - p0.x, p1.y - p0.y)
            px, py = p0.x + dx * length * 0.5, p0.y + dy * length * 0.5
            dlx, dly = dy, -dx
            left = (px - dlx * w, py - dly * w)
            right = (px + dlx * w, py + dly * w)
            first_left, first_right = left, right
        else:
            dx, dy, _ = _normalize(p1.x - p0.x, p1.y - p0.y)
            left, right = self._cap(line_cap, left, right, p0, dx, dy,
                                    width, ncap, False)

        for _ in range(start, end):
            if p1.flags & _CORNER:
                if line_join is LineJoin.ROUND:
                    left, right = self._round_join(left, right, p0, p1, width, ncap)
                elif line_join is LineJoin.BEVEL or p1.flags & _BEVEL:
                    left, right = self._bevel_join(left, right, p0, p1, width)
                else:
                    left, right = self._miter_join(left, right, p0, p1, width)
            else:
                left, right = self._straight_join(left, right, p1, width)
            p0 = p1
            i1 += 1
            if i1 < npoints:
                p1 = points[i1]

        if closed:
            self.add_edge(first_left[0], first_left[1], left[0], left[1])
            self.add_edge(right[0], right[1], first_right[0], first_right[1])
        else:
            dx, dy, _ = _normalize(p1.x - p0.x, p1.y - p0.y)
            self._cap(line_cap, right, left, p1, -dx, -dy, width, ncap, True)

    def _stroke_dashes(self, shape: Shape, scale: float, closed: bool,
                       width: float) -> None:
        dashes = shape.stroke_dash_array
        count = len(dashes)
        join = shape.stroke_line_join
        cap = shape.stroke_line_cap

        if closed:
            self.points.append(replace(self.points[0]))
        source = [replace(p) for p in self.points]

        cur = replace(source[0])
        self.points = [replace(cur)]

        all_dash_len = sum(dashes)
        if count & 1:
            all_dash_len *= 2.0
        if all_dash_len > 0:
            dash_offset = math.fmod(shape.stroke_dash_offset, all_dash_len)
            if dash_offset < 0.0:
                dash_offset += all_dash_len
        else:
            dash_offset = math.nan

        idash = 0
        while dash_offset > dashes[idash]:
            dash_offset -= dashes[idash]
            idash = (idash + 1) % count
        dash_len = (dashes[idash] - dash_offset) * scale

        dash_on = True
        total_dist = 0.0
        j = 1
        while j < len(source):
            dx = source[j].x - cur.x
            dy = source[j].y - cur.y
            dist = math.sqrt(dx * dx + dy * dy)
            if total_dist + dist > dash_len:
                d = (dash_len - total_dist) / dist
                x = cur.x + dx * d
                y = cur.y + dy * d
                self._add_path_point(x, y, _CORNER)
                if len(self.points) > 1 and dash_on:
                    self._prepare_stroke(shape.miter_limit, join)
                    self._expand_stroke(self.points, False, join, cap, width)
                dash_on = not dash_on
                idash = (idash + 1) % count
                dash_len = dashes[idash] * scale
                cur = replace(cur, x=x, y=y, flags=_CORNER)
                total_dist = 0.0
                self.points = [replace(cur)]
            else:
                total_dist += dist
                cur = replace(source[j])
                self.points.append(replace(cur))
                j += 1

        if len(self.points) > 1 and dash_on:
            self._prepare_stroke(shape.miter_limit, join)
            self._expand_stroke(self.points, False, join, cap, width)

    def flatten_stroke(self, shape: Shape, scale: float) -> list[Edge]:
        """Add the outline edges of the stroke of every path of the shape."""
        width = shape.stroke_width * scale
        join = shape.stroke_line_join
        cap = shape.stroke_line_cap

        for path in shape.paths:
            self._flatten_path(path, scale, _CORNER)
            if len(self.points) < 2:
                continue

            closed = path.closed
            first, last = self.points[0], self.points[-1]
            if self._pt_equals(last.x, last.y, first.x, first.y):
                self.points.pop()
                closed = True

            if shape.stroke_dash_array:
                self._stroke_dashes(shape, scale, closed, width)
            else:
                self._prepare_stroke(shape.miter_limit, join)
                self._expand_stroke(self.points, closed, join, cap, width)
        return self.edges


def flatten_fill(shape: Shape, scale: float = 1.0, tess_tol: float = 0.25,
                 dist_tol: float = 0.01) -> list[Edge]:
    """Return the fill edges of a shape."""
    return EdgeBuilder(tess_tol, dist_tol).flatten_fill(shape, scale)


def flatten_stroke(shape: Shape, scale: float = 1.0, tess_tol: float = 0.25,
                   dist_tol: float = 0.01) -> list[Edge]:
    """Return the stroke outline edges of a shape."""
    return EdgeBuilder(tess_tol, dist_tol).flatten_stroke(shape, scale)