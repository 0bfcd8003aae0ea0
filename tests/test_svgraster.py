import pytest

from imgload.svgraster import Rasterizer, apply_opacity, lerp_rgba, rasterize
from imgload.svgshape import (
    FillRule,
    Gradient,
    GradientStop,
    Paint,
    PaintType,
    Path,
    Shape,
    SvgImage,
)

RED = 0xFF0000FF
WHITE = 0xFFFFFFFF
BLACK = 0xFF000000


def line_path(pts, closed=True):
    points = [pts[0]]
    for (x0, y0), (x1, y1) in zip(pts, pts[1:]):
        points.append((x0 + (x1 - x0) / 3, y0 + (y1 - y0) / 3))
        points.append((x0 + 2 * (x1 - x0) / 3, y0 + 2 * (y1 - y0) / 3))
        points.append((x1, y1))
    return Path(points, closed)


def rect(x0, y0, x1, y1):
    return line_path([(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)])


def px(buf, width, x, y):
    i = (y * width + x) * 4
    return tuple(buf[i:i + 4])


def image_of(*shapes, size=8):
    return SvgImage(size, size, list(shapes))


def test_apply_opacity_full_keeps_colour():
    assert apply_opacity(0x80112233, 1.0) == 0x80112233


def test_apply_opacity_zero_clears_alpha_only():
    c = 0xFF112233
    out = apply_opacity(c, 0.0)
    assert out >> 24 == 0
    assert out & 0xFFFFFF == c & 0xFFFFFF


def test_lerp_rgba_endpoints():
    c0, c1 = 0x10203040, 0xF0E0D0C0
    assert lerp_rgba(c0, c1, 0.0) == c0
    assert lerp_rgba(c0, c1, 1.0) == c1
    assert lerp_rgba(c0, c1, -3.0) == c0
    assert lerp_rgba(c0, c1, 5.0) == c1


def test_lerp_rgba_same_colour():
    assert lerp_rgba(0x7F3A1B22, 0x7F3A1B22, 0.37) == 0x7F3A1B22


def test_empty_image_is_transparent():
    out = rasterize(SvgImage(4, 3, []), 0, 0, 1, 4, 3)
    assert out == bytes(4 * 3 * 4)


def test_default_size_from_image_and_scale():
    out = rasterize(SvgImage(4, 3, []), scale=2.0)
    assert len(out) == 8 * 6 * 4


def test_covering_square_is_solid():
    shape = Shape(paths=[rect(-1, -1, 5, 5)], fill=Paint.solid(RED))
    out = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    assert all(px(out, 4, x, y) == (255, 0, 0, 255) for x in range(4) for y in range(4))


def test_invisible_shape_not_drawn():
    shape = Shape(paths=[rect(-1, -1, 5, 5)], fill=Paint.solid(RED), visible=False)
    out = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    assert out == bytes(64)


def test_pixels_outside_shape_stay_clear():
    shape = Shape(paths=[rect(0, 0, 2, 2)], fill=Paint.solid(RED))
    out = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    assert px(out, 4, 0, 0) == (255, 0, 0, 255)
    assert px(out, 4, 3, 3) == (0, 0, 0, 0)


def test_translation_moves_shape():
    shape = Shape(paths=[rect(0, 0, 2, 2)], fill=Paint.solid(RED))
    out = rasterize(image_of(shape, size=4), 2, 2, 1, 4, 4)
    assert px(out, 4, 3, 3)[3] == 255
    assert px(out, 4, 0, 0)[3] == 0


def test_scale_enlarges_shape():
    shape = Shape(paths=[rect(0, 0, 2, 2)], fill=Paint.solid(RED))
    plain = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    scaled = rasterize(image_of(shape, size=4), 0, 0, 2, 4, 4)
    assert px(plain, 4, 3, 3)[3] == 0
    assert px(scaled, 4, 3, 3)[3] == 255


@pytest.mark.parametrize("rule, inner_alpha", [
    (FillRule.NONZERO, 255),
    (FillRule.EVENODD, 0),
])
def test_fill_rules_on_nested_squares(rule, inner_alpha):
    shape = Shape(
        paths=[rect(-1, -1, 9, 9), rect(2, 2, 6, 6)],
        fill=Paint.solid(RED),
        fill_rule=rule,
    )
    out = rasterize(image_of(shape), 0, 0, 1, 8, 8)
    assert px(out, 8, 4, 4)[3] == inner_alpha
    assert px(out, 8, 0, 0)[3] == 255


def test_half_opacity_keeps_colour_lowers_alpha():
    shape = Shape(paths=[rect(-1, -1, 5, 5)], fill=Paint.solid(RED), opacity=0.5)
    out = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    r, g, b, a = px(out, 4, 1, 1)
    assert 0 < a < 255
    assert (r, g, b) == (255, 0, 0)


def test_transparent_pixel_takes_neighbour_colour():
    shape = Shape(paths=[rect(0, 0, 2, 4)], fill=Paint.solid(RED))
    out = rasterize(image_of(shape, size=4), 0, 0, 1, 4, 4)
    assert px(out, 4, 2, 1) == (255, 0, 0, 0)
    assert px(out, 4, 3, 1) == (0, 0, 0, 0)


def test_stroke_of_horizontal_line():
    shape = Shape(
        paths=[line_path([(0, 2), (8, 2)], closed=False)],
        stroke=Paint.solid(RED),
        stroke_width=2.0,
    )
    out = rasterize(SvgImage(8, 4, [shape]), 0, 0, 1, 8, 4)
    assert px(out, 8, 4, 1)[3] == 255
    assert px(out, 8, 4, 2)[3] == 255
    assert px(out, 8, 4, 0)[3] == 0
    assert px(out, 8, 4, 3)[3] == 0


def test_zero_width_stroke_not_drawn():
    shape = Shape(
        paths=[line_path([(0, 2), (8, 2)], closed=False)],
        stroke=Paint.solid(RED),
        stroke_width=0.0,
    )
    out = rasterize(SvgImage(8, 4, [shape]), 0, 0, 1, 8, 4)
    assert out == bytes(8 * 4 * 4)


def test_linear_gradient_increases_left_to_right():
    grad = Gradient(
        stops=(GradientStop(BLACK, 0.0), GradientStop(WHITE, 1.0)),
        xform=(0.0, 1.0 / 8, 0.0, 0.0, 0.0, 0.0),
    )
    shape = Shape(paths=[rect(-1, -1, 9, 9)],
                  fill=Paint(PaintType.LINEAR_GRADIENT, gradient=grad))
    out = rasterize(image_of(shape), 0, 0, 1, 8, 8)
    reds = [px(out, 8, x, 3)[0] for x in range(8)]
    assert reds == sorted(reds)
    assert reds[0] < reds[-1]


def test_radial_gradient_centre_differs_from_corner():
    grad = Gradient(
        stops=(GradientStop(WHITE, 0.0), GradientStop(BLACK, 1.0)),
        xform=(0.25, 0.0, 0.0, 0.25, -1.0, -1.0),
    )
    shape = Shape(paths=[rect(-1, -1, 9, 9)],
                  fill=Paint(PaintType.RADIAL_GRADIENT, gradient=grad))
    out = rasterize(image_of(shape), 0, 0, 1, 8, 8)
    assert px(out, 8, 4, 4)[0] > px(out, 8, 0, 0)[0]
    assert px(out, 8, 0, 0)[3] == 255


def test_gradient_without_stops_draws_nothing():
    grad = Gradient(stops=())
    shape = Shape(paths=[rect(-1, -1, 9, 9)],
                  fill=Paint(PaintType.LINEAR_GRADIENT, gradient=grad))
    out = rasterize(image_of(shape), 0, 0, 1, 8, 8)
    assert all(out[i] == 0 for i in range(3, len(out), 4))


def test_single_stop_gradient_matches_solid():
    grad = Gradient(stops=(GradientStop(RED, 0.5),))
    gradient_shape = Shape(paths=[rect(1, 1, 6, 5)],
                           fill=Paint(PaintType.LINEAR_GRADIENT, gradient=grad))
    solid_shape = Shape(paths=[rect(1, 1, 6, 5)], fill=Paint.solid(RED))
    a = rasterize(image_of(gradient_shape), 0, 0, 1, 8, 8)
    b = rasterize(image_of(solid_shape), 0, 0, 1, 8, 8)
    assert a == b


def test_stride_padding_left_zero_and_rows_match():
    shape = Shape(paths=[rect(0.5, 0.5, 3.5, 2.5)], fill=Paint.solid(RED))
    image = image_of(shape, size=4)
    packed = rasterize(image, 0, 0, 1, 4, 3)
    stride = 4 * 4 + 8
    padded = Rasterizer().rasterize(image, 0, 0, 1, 4, 3, stride)
    assert len(padded) == 3 * stride
    for y in range(3):
        row = padded[y * stride:(y + 1) * stride]
        assert bytes(row[:16]) == packed[y * 16:(y + 1) * 16]
        assert bytes(row[16:]) == bytes(8)


def test_rasterizer_reuse_gives_same_result():
    shape = Shape(paths=[rect(0.3, 0.7, 5.2, 6.1)], fill=Paint.solid(RED),
                  stroke=Paint.solid(WHITE), stroke_width=1.5)
    rast = Rasterizer()
    first = rast.rasterize(image_of(shape), 0, 0, 1, 8, 8)
    second = rast.rasterize(image_of(shape), 0, 0, 1, 8, 8)
    assert first == second
    assert any(first[i] for i in range(3, len(first), 4))


def test_stride_too_small_rejected():
    with pytest.raises(ValueError):
        Rasterizer().rasterize(SvgImage(4, 4, []), 0, 0, 1, 4, 4, 8)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Rasterizer().rasterize(SvgImage(4, 4, []), 0, 0, 1, -1, 4)