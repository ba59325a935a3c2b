from gridterm.glyph import BLANK, DEFAULT_BG, DEFAULT_FG, Attr, Glyph


def test_clear_resets_content_and_attributes():
    g = Glyph(u=ord("x"), mode=Attr.BOLD | Attr.WRAP, fg=1, bg=2)
    g.clear(5, 6)
    assert g.u == BLANK
    assert g.mode == Attr.NULL
    assert (g.fg, g.bg) == (5, 6)


def test_clear_defaults_to_default_colours():
    g = Glyph(u=ord("y"), fg=3, bg=4)
    g.clear()
    assert (g.fg, g.bg) == (DEFAULT_FG, DEFAULT_BG)
    assert g.char == " "


def test_copy_is_independent():
    g = Glyph(u=ord("a"), mode=Attr.WIDE)
    c = g.copy()
    assert c == g
    c.mode |= Attr.WRAP
    c.u = ord("b")
    assert g.mode == Attr.WIDE
    assert g.u == ord("a")


def test_copied_glyph_keeps_flags_and_masks_independently():
    g = Glyph(u=ord("z"), mode=Attr.WRAP | Attr.SET)
    c = g.copy()
    assert c.mode & Attr.WRAP
    assert not (c.mode & Attr.WDUMMY)
    c.mode &= ~Attr.WRAP
    assert c.mode == Attr.SET
    assert g.mode == Attr.WRAP | Attr.SET


def test_char_property_reflects_codepoint():
    assert Glyph(u=0x2500).char == "\u2500"