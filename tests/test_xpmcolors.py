import pytest

from imgload.xpmcolors import color_to_argb


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("none", 0x00000000),
        ("black", 0xFF000000),
        ("white", 0xFFFFFFFF),
        ("red", 0xFFFF0000),
        ("green", 0xFF00FF00),
        ("blue", 0xFF0000FF),
    ],
)
def test_known_names(spec, expected):
    assert color_to_argb(spec) == expected


def test_names_are_case_insensitive():
    assert color_to_argb("RED") == color_to_argb("red")
    assert color_to_argb("White") == color_to_argb("white")


def test_prefix_matches_first_known_name():
    assert color_to_argb("bl") == color_to_argb("black")


def test_unknown_name():
    assert color_to_argb("purple") is None
    assert color_to_argb("blacker") is None


def test_six_digit_hex():
    assert color_to_argb("#ff0000") == color_to_argb("red")
    assert color_to_argb("#0000ff") == color_to_argb("blue")


def test_three_digit_hex_doubles_digits():
    assert color_to_argb("#fff") == color_to_argb("#ffffff")
    assert color_to_argb("#0f0") == color_to_argb("green")


def test_twelve_digit_hex_takes_high_bytes():
    assert color_to_argb("#ffff00000000") == color_to_argb("#ff0000")
    assert color_to_argb("#12ab34cd56ef") == color_to_argb("#123456")


def test_hex_is_always_opaque():
    result = color_to_argb("#000000")
    assert result >> 24 == 0xFF


def test_unsupported_hex_length():
    assert color_to_argb("#12345") is None