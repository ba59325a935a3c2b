import pytest

from gridterm.boxdraw import (
    BDB,
    BDL,
    BOXDATA,
    BRL,
    LH,
    Rect,
    box_index,
    box_rects,
    is_boxdraw,
    shade_color,
)


def _area(rects):
    return sum(r.w * r.h for r in rects)


def test_light_horizontal_is_boxdraw():
    assert is_boxdraw(0x2500, True, False)
    assert BOXDATA[0x00] == BDL + LH


def test_dashes_are_not_supported():
    assert not is_boxdraw(0x2504, True, False)


def test_boxdraw_disabled():
    assert not is_boxdraw(0x2500, False, False)


def test_braille_only_when_enabled():
    assert is_boxdraw(0x2801, False, True)
    assert not is_boxdraw(0x2801, True, False)


def test_box_index_braille():
    assert box_index(0x28AB, braille=True) == BRL | 0xAB


def test_box_index_bold():
    plain = box_index(0x2500)
    assert box_index(0x2500, bold=True, boxdraw_bold=True) == plain | BDB
    assert box_index(0x2500, bold=True, boxdraw_bold=False) == plain


def test_full_block_fills_cell():
    bd = box_index(0x2588)
    assert box_rects(3, 5, 10, 20, bd) == [Rect(3, 5, 10, 20)]


def test_upper_half_block():
    rects = box_rects(0, 0, 10, 20, box_index(0x2580))
    assert rects == [Rect(0, 0, 10, 10)]


def test_left_half_block():
    rects = box_rects(0, 0, 10, 20, box_index(0x258C))
    assert rects == [Rect(0, 0, 5, 20)]


def test_right_half_and_left_half_tile_the_cell():
    left = box_rects(0, 0, 10, 20, box_index(0x258C))
    right = box_rects(0, 0, 10, 20, box_index(0x2590))
    assert _area(left + right) == 10 * 20
    assert right[0].x == left[0].w


def test_quadrant_three_parts():
    rects = box_rects(0, 0, 10, 20, box_index(0x2599))
    assert len(rects) == 3
    assert _area(rects) == 10 * 20 * 3 // 4


@pytest.mark.parametrize("w,h", [(8, 16), (9, 17), (7, 13)])
def test_full_braille_covers_cell(w, h):
    rects = box_rects(0, 0, w, h, box_index(0x28FF, braille=True))
    assert len(rects) == 8
    assert _area(rects) == w * h


def test_light_horizontal_spans_width():
    rects = box_rects(2, 4, 8, 16, box_index(0x2500))
    assert len(rects) == 2
    assert min(r.x for r in rects) == 2
    assert max(r.x + r.w for r in rects) == 2 + 8
    assert len({r.y for r in rects}) == 1


def test_light_vertical_spans_height():
    rects = box_rects(0, 0, 8, 16, box_index(0x2502))
    assert min(r.y for r in rects) == 0
    assert max(r.y + r.h for r in rects) == 16


def test_bold_stem_is_thicker():
    thin = box_rects(0, 0, 16, 32, box_index(0x2500))
    thick = box_rects(0, 0, 16, 32, box_index(0x2500, bold=True, boxdraw_bold=True))
    assert thick[0].h > thin[0].h


def test_double_horizontal_draws_two_lines():
    rects = box_rects(0, 0, 8, 16, box_index(0x2550))
    assert len(rects) == 4
    assert len({r.y for r in rects}) == 2


def test_shade_returns_shaded_rect():
    rects = box_rects(0, 0, 8, 16, box_index(0x2592))
    assert rects == [Rect(0, 0, 8, 16, shade=2)]


def test_shade_color_extremes():
    fg, bg = (0xFFFF, 0x1234, 0), (0, 0x4321, 0xFFFF)
    assert shade_color(fg, bg, 4) == fg
    assert shade_color(fg, bg, 0) == bg


def test_shade_color_is_between():
    fg, bg = (0xFFFF, 0xFFFF, 0xFFFF), (0, 0, 0)
    mixed = shade_color(fg, bg, 2)
    assert all(0 < c < 0xFFFF for c in mixed)


def test_unsupported_shape_draws_nothing():
    assert box_rects(0, 0, 8, 16, 0) == []