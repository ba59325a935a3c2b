"""Keyboard-driven cursor movement, search and selection over the terminal grid."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field, replace
from enum import IntFlag
from typing import Callable, Optional, Union

from wcwidth import wcwidth

from .glyph import DEFAULT_BG, DEFAULT_FG, Attr, Glyph
from .screen import Screen, SelectionType, SnapMode

SHORT_DELIMITERS = "!\"#$%&'()*+,-./:;<=>?@[\\]^`{|}~ "
LONG_DELIMITERS = " "
MAX_QUANTIFIER = 99999999

_WRAP_LINE = 1 << 0
_WRAP_EDGE = 1 << 1
_SEL_IDLE = 0

_START = "<start>"
_DIRECT_SEARCH_FORWARD = "<search-forward>"
_DIRECT_SEARCH_BACKWARD = "<search-backward>"

_MODE_LABELS = (" MOVE ", "", " SELECT ", " RSELECT ", " LSELECT ",
                " SEARCH FW ", " SEARCH BW ", " FIND FW ", " FIND BW ")

_DIGITS = {str(d): d for d in range(10)}
_DIGITS.update({f"KP_{d}": d for d in range(10)})

# 0 left, 1 up, 2 right, 3 down
_DIRECTIONS = {
    "h": 0, "Left": 0, "KP_Left": 0,
    "k": 1, "Up": 1, "KP_Up": 1,
    "l": 2, "Right": 2, "KP_Right": 2,
    "j": 3, "Down": 3, "KP_Down": 3,
}


class KbdMode(IntFlag):
    """Sub-modes of keyboard selection."""

    MOVE = 0
    SELECT = 1 << 1
    LSELECT = 1 << 2
    FIND = 1 << 3
    SEARCH = 1 << 4


@dataclass
class KCursor:
    """A position in the scrolled view together with its line and line length."""

    x: int = 0
    y: int = 0
    line: list = field(default_factory=list)
    len: int = 0


def _lower(u: int) -> int:
    s = chr(u).lower()
    return ord(s) if len(s) == 1 else u


class KeyboardSelect:
    """Vi-like keyboard navigation of a Screen, with search and selection."""

    def __init__(self, screen: Screen, short_delims: str = SHORT_DELIMITERS,
                 long_delims: str = LONG_DELIMITERS,
                 on_copy: Optional[Callable[[Optional[str]], object]] = None) -> None:
        self.screen = screen
        self.short_delims = short_delims
        self.long_delims = long_delims
        self.on_copy = on_copy
        self.clipboard: Optional[str] = None
        self.in_use = False
        self.quant = 0
        self.seltype = SelectionType.REGULAR
        self.mode = KbdMode.MOVE
        self.direct_search = False
        self.search: list[Glyph] = []
        self.search_dir = 1
        self.search_case = False
        self.find_dir = 1
        self.find_till = False
        self.find_char = 0
        self.cursor = KCursor()
        self.old_cursor = KCursor()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    # state helpers

    @property
    def is_select_mode(self) -> bool:
        """Whether a character or line selection is being made."""
        return self.in_use and bool(self.mode & (KbdMode.SELECT | KbdMode.LSELECT))

    @property
    def is_search_mode(self) -> bool:
        """Whether a search string is being typed."""
        return self.in_use and bool(self.mode & KbdMode.SEARCH)

    def _top(self) -> int:
        s = self.screen
        return 0 if s.alt else -s.histf + s.scr

    def _bot(self) -> int:
        s = self.screen
        return s.rows - 1 if s.alt else s.rows - 1 + s.scr

    @staticmethod
    def _is_wrapped(c: KCursor) -> bool:
        return c.len > 0 and bool(c.line[c.len - 1].mode & Attr.WRAP)

    def _set_mode(self, mode: KbdMode) -> None:
        self.mode = KbdMode(mode)
        self.screen.dirty[0] = True

    def _full_dirty(self) -> None:
        self.screen.dirty = [True] * len(self.screen.dirty)

    def _load_line(self, c: KCursor) -> None:
        c.line = self.screen.line(c.y)
        c.len = self.screen.line_len(c.line)

    def _select_text(self) -> None:
        if not self.is_select_mode:
            return
        s = self.screen
        if self.mode & KbdMode.LSELECT:
            s.select_extend(s.cols - 1, self.cursor.y, SelectionType.RECTANGULAR, False)
        else:
            s.select_extend(self.cursor.x, self.cursor.y, self.seltype, False)
        if s.sel.mode == _SEL_IDLE:
            self._set_mode(self.mode & ~(KbdMode.SELECT | KbdMode.LSELECT))

    def _copy_to_clipboard(self) -> None:
        s = self.screen
        if self.mode & KbdMode.LSELECT:
            s.select_extend(s.cols - 1, self.cursor.y, SelectionType.RECTANGULAR, True)
            s.sel.type = SelectionType.REGULAR
        else:
            s.select_extend(self.cursor.x, self.cursor.y, self.seltype, True)
        self.clipboard = s.get_selection()
        if self.on_copy is not None:
            self.on_copy(self.clipboard)

    def _clear_highlights(self) -> None:
        s = self.screen
        for y in range(0 if s.alt else -s.histf, s.rows):
            for g in s.line_abs(y):
                g.mode &= ~Attr.HIGHLIGHT
        self._full_dirty()

    def _add_search_char(self, u: int) -> None:
        limit = self.screen.cols - 2
        g = Glyph(u, Attr.NULL)
        self.search.append(g)
        if wcwidth(chr(u)) > 1:
            g.mode = Attr.WIDE
            if len(self.search) < limit:
                self.search.append(Glyph(0, Attr.WDUMMY))

    # movement

    def move_to(self, x: int, y: int) -> None:
        """Put the cursor at (x, y), scrolling the view when y leaves the screen."""
        s = self.screen
        if y < 0:
            s.kscroll_up(-y)
        elif y >= s.rows:
            s.kscroll_down(y - s.rows + 1)
        c = self.cursor
        c.x = min(max(x, 0), s.cols - 1)
        c.y = min(max(y, 0), s.rows - 1)
        self._load_line(c)
        if c.x > 0 and c.line[c.x].mode & Attr.WDUMMY:
            c.x -= 1

    def _move_forward(self, c: KCursor, dx: int, wrap: int) -> Optional[KCursor]:
        cols = self.screen.cols
        n = replace(c)
        n.x += dx
        if 0 <= n.x < cols and n.line[n.x].mode & Attr.WDUMMY:
            n.x += dx
        if n.x < 0:
            if not wrap:
                return None
            n.y -= 1
            if n.y < self._top():
                return None
            self._load_line(n)
            if wrap & _WRAP_LINE and self._is_wrapped(n):
                n.x = n.len - 1
            elif wrap & _WRAP_EDGE:
                n.x = cols - 1
            else:
                return None
            if n.x > 0 and n.line[n.x].mode & Attr.WDUMMY:
                n.x -= 1
        elif n.x >= cols:
            if (wrap & _WRAP_EDGE) or (wrap & _WRAP_LINE and self._is_wrapped(n)):
                n.y += 1
                if n.y > self._bot():
                    return None
                self._load_line(n)
                n.x = 0
            else:
                return None
        elif n.x >= n.len and dx > 0 and wrap & _WRAP_LINE:
            if n.x == n.len and self._is_wrapped(n) and n.y < self._bot():
                n.y += 1
                self._load_line(n)
                n.x = 0
            elif not wrap & _WRAP_EDGE:
                return None
        return n

    def _step_line(self, c: KCursor, direction: int) -> None:
        self._load_line(c)
        c.x = c.len - 1 if direction < 0 and c.len > 0 else 0
        if c.x > 0 and c.line[c.x].mode & Attr.WDUMMY:
            c.x -= 1

    # search

    def _is_match(self, c: KCursor) -> bool:
        if c.x + len(self.search) > c.len and (not self._is_wrapped(c) or c.y >= self._bot()):
            return False
        start = c
        first = True
        for g in self.search:
            if g.mode & Attr.WDUMMY:
                continue
            if not first:
                nxt = self._move_forward(c, 1, _WRAP_LINE)
                if nxt is None:
                    return False
                c = nxt
            first = False
            u = c.line[c.x].u
            if g.u != (u if self.search_case else _lower(u)):
                return False
        m = start
        for g in self.search:
            if not g.mode & Attr.WDUMMY:
                m.line[m.x].mode |= Attr.HIGHLIGHT
                m = self._move_forward(m, 1, _WRAP_LINE) or m
        return True

    def search_all(self) -> int:
        """Highlight every match of the search string; return how many there are."""
        if not self.search:
            return 0
        count = 0
        for y in range(self._top(), self._bot() + 1):
            line = self.screen.line(y)
            length = self.screen.line_len(line)
            count += sum(self._is_match(KCursor(x, y, line, length)) for x in range(length))
        self._full_dirty()
        return count

    def search_next(self, direction: int) -> None:
        """Move to the quant-th next match in direction, wrapping around once."""
        if not self.search:
            self.quant = 0
            return
        c = replace(self.cursor)
        n = replace(self.cursor)
        if direction < 0 and c.x > c.len:
            c.x = c.len
        wrapped = 0
        self.quant = max(self.quant, 1)
        while self.quant > 0:
            nxt = self._move_forward(c, direction, _WRAP_LINE)
            if nxt is None:
                c.y += direction
                if c.y < self._top():
                    c.y = self._bot()
                    wrapped += 1
                elif c.y > self._bot():
                    c.y = self._top()
                    wrapped += 1
                if wrapped > 1:
                    break
                self._step_line(c, direction)
            else:
                c = nxt
            if self._is_match(c):
                n = replace(c)
                self.quant -= 1
        self.move_to(n.x, n.y)
        self.quant = 0

    def find_next(self, direction: int, repeat: bool) -> None:
        """Move to the quant-th occurrence of the find character (or just before it)."""
        c = replace(self.cursor)
        n = replace(self.cursor)
        yoff = 0
        if c.len <= 0 or self.find_char == 0:
            self.quant = 0
            return
        if direction < 0 and c.x > c.len:
            c.x = c.len
        self.quant = max(self.quant, 1)
        skip_first = self.quant == 1 and repeat and self.find_till
        while self.quant > 0:
            prev = c
            nxt = self._move_forward(c, direction, _WRAP_LINE)
            if nxt is None:
                break
            c = nxt
            if c.line[c.x].u == self.find_char:
                if skip_first and prev.x == self.cursor.x and prev.y == self.cursor.y:
                    skip_first = False
                    continue
                n.x = prev.x if self.find_till else c.x
                n.y = c.y
                yoff = prev.y - c.y if self.find_till else 0
                self.quant -= 1
        self.move_to(n.x, n.y)
        self.move_to(self.cursor.x, self.cursor.y + yoff)
        self.quant = 0

    def _is_delim(self, c: KCursor, xoff: int, delims: str) -> bool:
        if xoff:
            nxt = self._move_forward(c, xoff, _WRAP_LINE)
            if nxt is None:
                return True
            c = nxt
        u = c.line[c.x].u
        return u == 0 or chr(u) in delims

    def next_word(self, start: bool, direction: int, delims: str) -> None:
        """Move to the quant-th next word start (start) or word end, in direction."""
        c = replace(self.cursor)
        n = replace(self.cursor)
        xoff = -1 if start else 1
        if direction < 0 and c.x > c.len:
            c.x = c.len
        elif direction > 0 and c.x >= c.len and c.len > 0:
            c.x = c.len - 1
        self.quant = max(self.quant, 1)
        while self.quant > 0:
            nxt = self._move_forward(c, direction, _WRAP_LINE)
            if nxt is None:
                c.y += direction
                if c.y < self._top() or c.y > self._bot():
                    break
                self._step_line(c, direction)
            else:
                c = nxt
            if (c.len > 0 and not self._is_delim(c, 0, delims)
                    and self._is_delim(c, xoff, delims)):
                n = replace(c)
                self.quant -= 1
        self.move_to(n.x, n.y)
        self.quant = 0

    def paste_into_search(self, data: Union[bytes, str], append: bool) -> None:
        """Add pasted text to the search string, keeping partial UTF-8 for the next call."""
        if not append:
            self._decoder.reset()
        text = data if isinstance(data, str) else self._decoder.decode(data)
        for ch in text:
            if ord(ch) > 0x1F and len(self.search) < self.screen.cols - 2:
                self._add_search_char(ord(ch))
        self.screen.dirty[self.screen.rows - 1] = True

    # drawing

    def status_bar(self, y: int) -> list[tuple[int, Glyph]]:
        """Cells of the mode indicator and search prompt to draw over row y."""
        out: list[tuple[int, Glyph]] = []
        if not self.in_use:
            return out
        cols, rows = self.screen.cols, self.screen.rows

        def cell(col: int, u: int, mode: Attr = Attr.REVERSE) -> None:
            out.append((col, Glyph(u, mode, DEFAULT_FG, DEFAULT_BG)))

        if y == 0:
            if self.is_search_mode:
                m = 5 + (1 if self.search_dir < 0 else 0)
            elif self.mode & KbdMode.FIND:
                m = 7 + (1 if self.find_dir < 0 else 0)
            elif self.mode & KbdMode.SELECT:
                m = 2 + (1 if self.seltype == SelectionType.RECTANGULAR else 0)
            else:
                m = int(self.mode)
            label = _MODE_LABELS[m]
            quant = f" {self.quant}" if self.quant else ""
            if self.cursor.y != y or self.cursor.x < cols - len(quant) - len(label):
                i = cols - 1
                for ch in reversed(label + quant[:0]):
                    if i < 0:
                        break
                    cell(i, ord(ch))
                    i -= 1
                for ch in reversed(quant):
                    if i < 0:
                        break
                    cell(i, ord(ch))
                    i -= 1
        if y == rows - 1 and self.is_search_mode:
            for i in range(cols):
                cell(i, ord(" "))
            cell(0, ord("/" if self.search_dir > 0 else "?"))
            for i, g in enumerate(self.search):
                mode = g.mode | Attr.WIDE | Attr.REVERSE
                if g.u == ord(" ") or mode & Attr.WDUMMY:
                    continue
                cell(i + 1, g.u, mode)
            cell(len(self.search) + 1, ord(" "), Attr.NULL)
        return out

    # entry points

    def start(self) -> bool:
        """Enter keyboard selection at the terminal cursor; True when the mode toggles."""
        return self.handle_key(_START)

    def search_forward(self) -> bool:
        """Enter keyboard selection and start a direct forward search."""
        toggled = self.handle_key(_START)
        self.handle_key(_DIRECT_SEARCH_FORWARD)
        return toggled

    def search_backward(self) -> bool:
        """Enter keyboard selection and start a direct backward search."""
        toggled = self.handle_key(_START)
        self.handle_key(_DIRECT_SEARCH_BACKWARD)
        return toggled

    def _handle_search_key(self, key: str, text: str) -> Optional[str]:
        """Process a key typed into the search prompt; return the key to act on further."""
        if key in ("Escape", "Return"):
            if key == "Escape":
                self.search.clear()
            self.search_case = any(g.u != _lower(g.u) for g in self.search)
            count = self.search_all()
            self.search_next(self.search_dir)
            self._select_text()
            self._set_mode(self.mode & ~KbdMode.SEARCH)
            if count == 0 and self.direct_search:
                key = "Escape"
        elif key == "BackSpace":
            if self.search:
                removed = self.search.pop()
                if self.search and removed.mode & Attr.WDUMMY:
                    self.search.pop()
        else:
            if not text or len(self.search) >= self.screen.cols - 2:
                return None
            self._add_search_char(ord(text[0]))
        if not (key == "Escape" and self.direct_search):
            self.screen.dirty[self.screen.rows - 1] = True
            return None
        return key

    def handle_key(self, key: str, text: str = "", force_quit: bool = False) -> bool:
        """Act on a key given by its keysym name; True when selection mode is entered or left."""
        s = self.screen
        c = self.cursor
        alt = s.alt

        if self.is_search_mode and not force_quit:
            key = self._handle_search_key(key, text)
            if key is None:
                return False
        elif self.mode & KbdMode.FIND and not force_quit:
            self.find_char = 0
            if key in ("Escape", "Return"):
                self.quant = 0
            else:
                if not text:
                    return False
                self.find_char = ord(text[0])
                self.find_next(self.find_dir, False)
                self._select_text()
            self._set_mode(self.mode & ~KbdMode.FIND)
            return False

        if key == _START:
            self.search = []
            self.in_use = True
            self.move_to(s.cursor.x, s.cursor.y)
            self.old_cursor = replace(self.cursor)
            self._set_mode(KbdMode.MOVE)
            return True
        if key == "V":
            if self.mode & KbdMode.LSELECT:
                s.select_clear()
                self._set_mode(self.mode & ~(KbdMode.SELECT | KbdMode.LSELECT))
            elif self.mode & KbdMode.SELECT:
                s.select_extend(s.cols - 1, c.y, SelectionType.RECTANGULAR, False)
                s.sel.ob.x = 0
                self._full_dirty()
                self._set_mode((self.mode ^ KbdMode.SELECT) | KbdMode.LSELECT)
            else:
                s.select_start(0, c.y, SnapMode.NONE)
                s.select_extend(s.cols - 1, c.y, SelectionType.RECTANGULAR, False)
                self._set_mode(self.mode | KbdMode.LSELECT)
        elif key == "v":
            if self.mode & KbdMode.SELECT:
                s.select_clear()
                self._set_mode(self.mode & ~(KbdMode.SELECT | KbdMode.LSELECT))
            elif self.mode & KbdMode.LSELECT:
                s.select_extend(c.x, c.y, self.seltype, False)
                self._set_mode((self.mode ^ KbdMode.LSELECT) | KbdMode.SELECT)
            else:
                s.select_start(c.x, c.y, SnapMode.NONE)
                self._set_mode(self.mode | KbdMode.SELECT)
        elif key == "s":
            if not self.mode & KbdMode.LSELECT:
                self.seltype = (SelectionType.RECTANGULAR
                                if self.seltype == SelectionType.REGULAR
                                else SelectionType.REGULAR)
                s.select_extend(c.x, c.y, self.seltype, False)
        elif key in ("y", "Y"):
            if self.is_select_mode:
                self._copy_to_clipboard()
                s.select_clear()
                self._set_mode(self.mode & ~(KbdMode.SELECT | KbdMode.LSELECT))
        elif key in (_DIRECT_SEARCH_FORWARD, _DIRECT_SEARCH_BACKWARD,
                     "slash", "KP_Divide", "question"):
            self.direct_search = key in (_DIRECT_SEARCH_FORWARD, _DIRECT_SEARCH_BACKWARD)
            self.search_dir = -1 if key in ("question", _DIRECT_SEARCH_BACKWARD) else 1
            self.search = []
            self._set_mode(self.mode | KbdMode.SEARCH)
            self._clear_highlights()
            return False
        elif key in ("q", "Escape", "Return"):
            if key != "Return":
                if not self.in_use:
                    return False
                if self.quant and not force_quit:
                    self.quant = 0
                    return self._finish()
                s.select_clear()
                if self.is_select_mode and not force_quit:
                    self._set_mode(KbdMode.MOVE)
                    return self._finish()
                self._set_mode(KbdMode.MOVE)
            if self.is_select_mode:
                self._copy_to_clipboard()
            self.in_use = False
            self.quant = 0
            self.search = []
            s.kscroll_down(s.histf)
            self._clear_highlights()
            return True
        elif key in ("n", "N"):
            self.search_next(self.search_dir if key == "n" else -self.search_dir)
        elif key == "BackSpace":
            self.move_to(0, c.y)
        elif key == "exclam":
            self.move_to(s.cols // 2, c.y)
        elif key == "underscore":
            self.move_to(s.cols - 1, c.y)
        elif key in ("dollar", "A"):
            eol = c.len - 1
            line = c.line
            is_last = c.x == eol or (
                c.x == eol - 1 and eol >= 1 and bool(line[eol - 1].mode & Attr.WIDE))
            if is_last and self._is_wrapped(c) and c.y < self._bot():
                self.move_to(s.line_len(s.line(c.y + 1)) - 1, c.y + 1)
            else:
                self.move_to(s.cols - 1 if is_last else eol, c.y)
        elif key in ("asciicircum", "I"):
            first = next((i for i in range(c.len) if c.line[i].u != ord(" ")), 0)
            self.move_to(first, c.y)
        elif key in ("End", "KP_End"):
            self.move_to(c.x, s.rows - 1)
        elif key in ("Home", "KP_Home", "H"):
            self.move_to(c.x, 0)
        elif key == "M":
            self.move_to(c.x, (s.rows - 1) // 2 if alt
                         else min(s.cursor.y + s.scr, s.rows - 1) // 2)
        elif key == "L":
            self.move_to(c.x, s.rows - 1 if alt else min(s.cursor.y + s.scr, s.rows - 1))
        elif key in ("Prior", "Page_Up", "KP_Prior", "KP_Page_Up", "K"):
            prev = s.scr
            s.kscroll_up(s.rows)
            self.move_to(c.x, 0 if alt else max(0, c.y - s.rows + s.scr - prev))
        elif key in ("Next", "Page_Down", "KP_Next", "KP_Page_Down", "J"):
            prev = s.scr
            s.kscroll_down(s.rows)
            self.move_to(c.x, s.rows - 1 if alt else min(
                min(s.cursor.y + s.scr, s.rows - 1), c.y + s.rows + s.scr - prev))
        elif key in ("asterisk", "KP_Multiply"):
            self.move_to(s.cols // 2, (s.rows - 1) // 2)
        elif key == "g":
            s.kscroll_up(s.histf)
            self.move_to(c.x, 0)
        elif key == "G":
            s.kscroll_down(s.histf)
            self.move_to(c.x, s.rows - 1 if alt else s.cursor.y)
        elif key in ("b", "B"):
            self.next_word(True, -1, self.short_delims if key == "b" else self.long_delims)
        elif key in ("w", "W"):
            self.next_word(True, 1, self.short_delims if key == "w" else self.long_delims)
        elif key in ("e", "E"):
            self.next_word(False, 1, self.short_delims if key == "e" else self.long_delims)
        elif key == "z":
            prev = s.scr
            dy = c.y - (s.rows - 1) // 2
            if dy <= 0:
                s.kscroll_up(-dy)
            else:
                s.kscroll_down(dy)
            self.move_to(c.x, c.y + s.scr - prev)
        elif key in ("f", "F", "t", "T"):
            self.find_dir = 1 if key in ("f", "t") else -1
            self.find_till = key in ("t", "T")
            self._set_mode(self.mode | KbdMode.FIND)
            return False
        elif key in ("semicolon", "r"):
            self.find_next(self.find_dir, True)
        elif key in ("comma", "R"):
            self.find_next(-self.find_dir, True)
        elif key in ("0", "KP_0") and not self.quant:
            self.move_to(0, c.y)
        elif key in _DIGITS:
            q = self.quant * 10 + _DIGITS[key]
            self.quant = q if q <= MAX_QUANTIFIER else self.quant
            s.dirty[0] = True
            return False
        elif key in _DIRECTIONS:
            i = _DIRECTIONS[key]
            self.quant = self.quant or 1
            step = 1 if i & 2 else -1
            if i & 1:
                c.y += self.quant * step
            else:
                cur = c
                while self.quant > 0:
                    nxt = self._move_forward(cur, step, _WRAP_LINE | _WRAP_EDGE)
                    if nxt is None:
                        break
                    cur = nxt
                    self.quant -= 1
                c.x, c.y = cur.x, cur.y
            self.move_to(c.x, c.y)
        else:
            return False
        return self._finish()

    def _finish(self) -> bool:
        self._select_text()
        self.quant = 0
        self.screen.dirty[0] = True
        return False