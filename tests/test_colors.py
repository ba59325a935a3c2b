import pytest

from gridterm.colors import change_alpha, clamp, invert_color


@pytest.mark.parametrize(
    "value,expected", [(-1.0, 0.0), (2.0, 1.0), (0.25, 0.25)]
)
def test_clamp(value, expected):
    assert clamp(value, 0.0, 1.0) == expected


def test_change_alpha_increases():
    assert change_alpha(0.5, 0.25) == pytest.approx(0.75)


def test_change_alpha_decreases():
    assert change_alpha(0.5, -0.25) == pytest.approx(0.25)


def test_change_alpha_caps_at_one():
    assert change_alpha(0.95, 0.25) == 1.0
    assert change_alpha(1.0, 0.25) == 1.0


def test_change_alpha_floors_at_zero():
    assert change_alpha(0.05, -0.25) == 0.0
    assert change_alpha(0.0, -0.25) == 0.0


def test_invert_black_is_white():
    assert invert_color(0, 0, 0, 0x8000) == (0xFFFF, 0xFFFF, 0xFFFF, 0x8000)


@pytest.mark.parametrize("rgb", [(0x1234, 0xABCD, 0x0F0F), (0, 0xFFFF, 0x7FFF)])
def test_invert_twice_is_identity(rgb):
    once = invert_color(*rgb, 0xFFFF)
    assert invert_color(*once) == (*rgb, 0xFFFF)


def test_invert_channels_sum_to_max():
    r, g, b, _ = invert_color(0x1234, 0x5678, 0x9ABC, 0)
    assert (r + 0x1234, g + 0x5678, b + 0x9ABC) == (0xFFFF, 0xFFFF, 0xFFFF)