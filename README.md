# imgload

Small pure-Python image readers and a scanline rasterizer. It needs nothing
outside the standard library.

- **XPM** (X PixMap v3) from a binary stream or from a list of strings.
- **XV thumbnails** (`P7 332`) from a binary stream.
- **Vector shapes**: fills and strokes are rasterized with anti-aliasing to
  non-premultiplied RGBA bytes. Strokes support joins, caps and dashes.
  Paint can be a solid colour, a linear gradient or a radial gradient.

## Installation

```
pip install imgload
```

## Surfaces

The loaders return an `imgload.surface.Surface`. It has these attributes:

- `width` and `height`.
- `format`, one of the `PixelFormat` members: `INDEX8`, `RGB332`,
  `ARGB8888` or `RGBA32`.
- `pixels`: one integer per pixel, stored row by row.
- `palette`: a list of `Color`, for `INDEX8` surfaces.
- `color_key`: the pixel value that is treated as transparent, or `None`.

`surface.pixel(x, y)` returns a single raw value. `surface.row(y)` returns a
copy of one row. `surface.to_rgba()` converts the whole image to RGBA bytes.
Pixels that match the colour key get an alpha of 0.

## Reading XPM images

```python
from imgload.xpm import is_xpm, load_xpm, read_xpm_from_array
from imgload.surface import ImageError

with open("icon.xpm", "rb") as fh:
    if is_xpm(fh):
        surface = load_xpm(fh)

surface = read_xpm_from_array([
    "2 2 2 1",
    "a c #ff0000",
    "b c None",
    "ab",
    "ba",
])
print(surface.width, surface.height, surface.format)  # 2 2 PixelFormat.INDEX8
print(surface.pixel(0, 0))                            # 0, a palette index
rgba = surface.to_rgba()
```

An image with at most 256 colours is read as an `INDEX8` surface. In that
case the colour `None` becomes the colour key. An image with more colours is
read as `ARGB8888`. `read_xpm_from_array_to_rgb888` always returns
`ARGB8888`.

Only `c` colour definitions are used. Symbolic (`s`) definitions are
skipped. Hotspot coordinates in the header are ignored.

Colours can be given in hex as `#rgb`, `#rrggbb` or `#rrrrggggbbbb`. A few
names are also accepted: `none`, `black`, `white`, `red`, `green` and
`blue`. Case does not matter, and a name may be abbreviated to a prefix.
`imgload.xpmcolors.color_to_argb` does this conversion.

## Reading XV thumbnails

```python
from imgload.xv import is_xv, load_xv

with open("thumb.xv", "rb") as fh:
    if is_xv(fh):
        surface = load_xv(fh)  # PixelFormat.RGB332
```

## Errors

Malformed data raises `imgload.surface.ImageError`. When a stream loader
fails, the stream goes back to the position where reading started. The
detection functions `is_xpm` and `is_xv` never move the stream.

## Rasterizing shapes

Shapes are built in code from the classes in `imgload.svgshape`:
`SvgImage`, `Shape`, `Path`, `Paint`, `Gradient` and `GradientStop`.

A `Path` is a start point followed by three points for each cubic curve.
Colours are packed as `r | g << 8 | b << 16 | a << 24`.

```python
from imgload.svgshape import SvgImage, Shape, Path, Paint
from imgload.svgraster import rasterize

square = Path(points=[(0, 0), (0, 0), (10, 0), (10, 0),
                      (10, 0), (10, 10), (10, 10),
                      (10, 10), (0, 10), (0, 10),
                      (0, 10), (0, 0), (0, 0)], closed=True)
image = SvgImage(width=10, height=10,
                 shapes=[Shape(paths=[square], fill=Paint.solid(0xFF0000FF))])
pixels = rasterize(image, 0, 0, 1.0, 10, 10)  # bytes, RGBA, 4 per pixel
```

To render many images, reuse one `imgload.svgraster.Rasterizer`. Its
`rasterize` method returns a `bytearray` and accepts a row `stride`.

The polygon edges are available without rendering.
`imgload.svgflatten.flatten_fill` returns the fill edges of a shape.
`imgload.svgflatten.flatten_stroke` returns the stroke outline edges.

## What it does not do

- It does not parse SVG text. The rasterizer only renders shapes that were
  built with `imgload.svgshape`.
- It reads only XPM and XV. It has no readers for other image formats and
  cannot write images.
- It has no command-line tool.

## Running the tests

```
pip install imgload[test]
pytest
```