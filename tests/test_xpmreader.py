import io

import pytest

from imgload.surface import ImageError
from imgload.xpmreader import (
    XpmHeader,
    XpmLineReader,
    parse_color_definition,
    parse_header,
)


def test_parse_header_basic():
    assert parse_header("4 3 2 1") == XpmHeader(4, 3, 2, 1)


def test_parse_header_ignores_hotspot_and_whitespace():
    assert parse_header("  16\t8 5 2 7 9") == XpmHeader(16, 8, 5, 2)


@pytest.mark.parametrize(
    "line", ["", "4 3 2", "a b c d", "0 3 2 1", "4 -3 2 1", "4 3 0 1", "4 3 2 0"]
)
def test_parse_header_rejects_invalid(line):
    with pytest.raises(ImageError, match="Invalid format description"):
        parse_header(line)


def test_color_definition_hex():
    assert parse_color_definition("a c #FF0000", 1) == ("a", 0xFFFF0000)


def test_color_definition_skips_symbolic_name():
    assert parse_color_definition("ab s symbol c black", 2) == ("ab", 0xFF000000)


def test_color_definition_none_is_transparent():
    assert parse_color_definition("x c None", 1) == ("x", 0x00000000)


def test_color_definition_skips_unknown_then_uses_next():
    assert parse_color_definition(". m octarine c white", 1) == (".", 0xFFFFFFFF)


def test_color_definition_key_may_be_space():
    key, argb = parse_color_definition("  c red", 1)
    assert key == " "
    assert argb == 0xFFFF0000


def test_color_definition_without_usable_colour_raises():
    with pytest.raises(ImageError, match="colour parse error"):
        parse_color_definition("x c octarine", 1)


def test_color_definition_empty_raises():
    with pytest.raises(ImageError):
        parse_color_definition("x", 1)


def test_array_reader_returns_items_in_order():
    reader = XpmLineReader(["1 1 1 1", "a c red", "a"])
    assert [reader.next_line(), reader.next_line(), reader.next_line(1)] == [
        "1 1 1 1",
        "a c red",
        "a",
    ]


def test_array_reader_exhausted_raises():
    reader = XpmLineReader(["only"])
    assert reader.next_line() == "only"
    with pytest.raises(ImageError, match="Premature end of data"):
        reader.next_line()


def test_stream_reader_reads_quoted_strings():
    src = io.BytesIO(b'/* XPM */\nstatic char *x[] = {\n"ab",\n"cd",\n};\n')
    reader = XpmLineReader(src)
    assert reader.next_line() == "ab"
    assert reader.next_line(2) == "cd"
    assert src.read() == b"};\n"


def test_stream_reader_fixed_length_truncated_raises():
    reader = XpmLineReader(io.BytesIO(b'"abcd"'))
    with pytest.raises(ImageError, match="Premature end of data"):
        reader.next_line(4)


def test_stream_reader_without_quote_raises():
    reader = XpmLineReader(io.BytesIO(b"no strings here"))
    with pytest.raises(ImageError, match="Premature end of data"):
        reader.next_line()


def test_stream_reader_unterminated_string_raises():
    reader = XpmLineReader(io.BytesIO(b'"open'))
    with pytest.raises(ImageError):
        reader.next_line()