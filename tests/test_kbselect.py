import pytest

from gridterm.glyph import Attr, Glyph
from gridterm.kbselect import KbdMode, KeyboardSelect
from gridterm.screen import Screen


def make(rows_text, cols=20, rows=4, hist=5):
    screen = Screen(cols, rows, hist_size=hist)
    for y, text in enumerate(rows_text):
        for x, ch in enumerate(text):
            screen.lines[y][x] = Glyph(ord(ch), Attr.SET)
    copied = []
    kb = KeyboardSelect(screen, on_copy=copied.append)
    return screen, kb, copied


def type_text(kb, text):
    for ch in text:
        kb.handle_key(ch, ch)


def test_start_and_exit_toggle():
    screen, kb, _ = make(["hello"])
    assert kb.start() is True
    assert kb.in_use
    assert kb.mode == KbdMode.MOVE
    assert kb.handle_key("Escape") is True
    assert not kb.in_use


def test_move_right_with_count():
    _, kb, _ = make(["hello world"])
    kb.start()
    kb.handle_key("3")
    assert kb.quant == 3
    kb.handle_key("l")
    assert kb.cursor.x == 3
    assert kb.quant == 0


def test_move_down():
    _, kb, _ = make(["a", "b"])
    kb.start()
    kb.handle_key("j")
    assert kb.cursor.y == 1


def test_dollar_moves_to_end_of_text():
    text = "hello"
    _, kb, _ = make([text])
    kb.start()
    kb.handle_key("dollar")
    assert kb.cursor.x == len(text) - 1


def test_caret_moves_to_first_nonblank():
    text = "   abc"
    screen, kb, _ = make([text])
    screen.cursor.x = 5
    kb.start()
    kb.handle_key("asciicircum")
    assert kb.cursor.x == text.index("a")


def test_word_motions():
    text = "foo bar baz"
    _, kb, _ = make([text])
    kb.start()
    kb.handle_key("w")
    assert kb.cursor.x == text.index("bar")
    kb.handle_key("b")
    assert kb.cursor.x == text.index("foo")
    kb.handle_key("e")
    assert kb.cursor.x == len("foo") - 1


def test_find_and_till():
    text = "hello world"
    _, kb, _ = make([text])
    kb.start()
    kb.handle_key("f")
    assert kb.mode & KbdMode.FIND
    kb.handle_key("o", "o")
    assert kb.cursor.x == text.index("o")
    assert not kb.mode & KbdMode.FIND
    kb.move_to(0, 0)
    kb.handle_key("t")
    kb.handle_key("w", "w")
    assert kb.cursor.x == text.index("w") - 1


def test_search_moves_to_match_and_highlights():
    text = "hello world"
    screen, kb, _ = make([text])
    kb.start()
    kb.handle_key("slash")
    assert kb.is_search_mode
    type_text(kb, "wor")
    kb.handle_key("Return")
    assert not kb.is_search_mode
    start = text.index("wor")
    assert kb.cursor.x == start
    assert all(screen.lines[0][x].mode & Attr.HIGHLIGHT for x in range(start, start + 3))


def test_search_all_counts_and_ignores_case():
    text = "HELLO hello xx"
    _, kb, _ = make([text])
    kb.start()
    kb.handle_key("slash")
    type_text(kb, "hello")
    kb.handle_key("Return")
    assert kb.search_case is False
    assert kb.search_all() == text.lower().count("hello")


def test_search_count_matches_occurrences():
    text = "ab ab ab"
    _, kb, _ = make([text])
    kb.start()
    kb.handle_key("slash")
    type_text(kb, "ab")
    assert kb.search_all() == text.count("ab")


def test_exit_clears_highlights():
    screen, kb, _ = make(["ab ab"])
    kb.start()
    kb.handle_key("slash")
    type_text(kb, "ab")
    kb.handle_key("Return")
    assert kb.handle_key("Return") is True
    assert not any(g.mode & Attr.HIGHLIGHT for g in screen.lines[0])


def test_direct_search_without_match_exits():
    _, kb, _ = make(["hello"])
    assert kb.search_forward() is True
    assert kb.direct_search
    type_text(kb, "zzz")
    assert kb.handle_key("Return") is True
    assert not kb.in_use


def test_character_selection_copy():
    text = "hello world"
    _, kb, copied = make([text])
    kb.start()
    kb.handle_key("v")
    assert kb.is_select_mode
    kb.handle_key("3")
    kb.handle_key("l")
    kb.handle_key("y")
    assert copied == [text[:4]]
    assert kb.clipboard == text[:4]
    assert not kb.is_select_mode


def test_line_selection_copy():
    text = "hello world"
    _, kb, copied = make([text])
    kb.start()
    kb.handle_key("V")
    assert kb.mode & KbdMode.LSELECT
    kb.handle_key("y")
    assert copied == [text + "\n"]


def test_escape_leaves_select_mode_first():
    _, kb, _ = make(["hello"])
    kb.start()
    kb.handle_key("v")
    assert kb.handle_key("Escape") is False
    assert kb.in_use
    assert kb.mode == KbdMode.MOVE
    assert kb.handle_key("Escape") is True


def test_escape_clears_quantifier_first():
    _, kb, _ = make(["hello"])
    kb.start()
    kb.handle_key("5")
    assert kb.handle_key("Escape") is False
    assert kb.in_use
    assert kb.quant == 0


def test_quantifier_limit():
    _, kb, _ = make(["x"])
    kb.start()
    for _ in range(9):
        kb.handle_key("9")
    assert kb.quant == 99999999


def test_move_to_clamps():
    screen, kb, _ = make(["x"])
    kb.start()
    kb.move_to(100, -3)
    assert kb.cursor.x == screen.cols - 1
    assert kb.cursor.y == 0


def test_moving_up_scrolls_into_history():
    screen, kb, _ = make(["one", "two", "three"], cols=10, rows=3)
    screen.scroll_up(0, 2, 2)
    kb.start()
    kb.handle_key("k")
    assert screen.scr == 1
    assert kb.cursor.y == 0
    kb.handle_key("Return")
    assert screen.scr == 0


@pytest.mark.parametrize("chunks", [[b"\xc3", b"\xa9"], [b"\xc3\xa9"]])
def test_paste_keeps_partial_utf8(chunks):
    _, kb, _ = make(["x"])
    kb.start()
    kb.handle_key("slash")
    for i, chunk in enumerate(chunks):
        kb.paste_into_search(chunk, i > 0)
    assert [g.u for g in kb.search] == [ord("é")]


def test_wide_char_in_search_and_backspace():
    _, kb, _ = make(["x"])
    kb.start()
    kb.handle_key("slash")
    kb.handle_key("a", "a")
    kb.handle_key("x", "漢")
    assert len(kb.search) == 3
    assert kb.search[1].mode & Attr.WIDE
    assert kb.search[2].mode & Attr.WDUMMY
    kb.handle_key("BackSpace")
    assert [g.u for g in kb.search] == [ord("a")]


def test_status_bar_shows_mode():
    screen, kb, _ = make(["x"], cols=20)
    assert kb.status_bar(0) == []
    kb.start()
    cells = dict((col, g) for col, g in kb.status_bar(0))
    label = "".join(chr(cells[i].u) for i in range(screen.cols - 6, screen.cols))
    assert label == " MOVE "
    assert all(cells[i].mode & Attr.REVERSE for i in range(screen.cols - 6, screen.cols))


def test_status_bar_search_prompt():
    screen, kb, _ = make(["x"], cols=20, rows=4)
    kb.start()
    kb.handle_key("question")
    type_text(kb, "ab")
    cells = dict(kb.status_bar(screen.rows - 1))
    assert chr(cells[0].u) == "?"
    assert chr(cells[1].u) + chr(cells[2].u) == "ab"
    assert chr(cells[3].u) == " "


def test_unknown_key_does_nothing():
    _, kb, _ = make(["hello"])
    kb.start()
    kb.handle_key("l")
    before = (kb.cursor.x, kb.cursor.y)
    assert kb.handle_key("F12") is False
    assert (kb.cursor.x, kb.cursor.y) == before