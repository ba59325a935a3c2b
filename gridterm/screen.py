"""The terminal grid with scrollback, reflow on resize and selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from .glyph import BLANK, DEFAULT_BG, DEFAULT_FG, Attr, Glyph

HISTSIZE = 2000
TAB_SPACES = 8
WORD_DELIMITERS = " "

_SEL_IDLE = 0
_SEL_EMPTY = 1
_SEL_READY = 2


class ScrollMode(IntEnum):
    """How scrolling up treats lines that leave the screen."""

    RESIZE = -1
    NOSAVEHIST = 0
    SAVEHIST = 1


class SelectionType(IntEnum):
    """Shape of a selection."""

    REGULAR = 1
    RECTANGULAR = 2


class SnapMode(IntEnum):
    """What a selection end snaps to."""

    NONE = 0
    WORD = 1
    LINE = 2


@dataclass
class _Point:
    x: int = -1
    y: int = 0


@dataclass
class Selection:
    """Selection state; y coordinates are relative to the scrolled view."""

    mode: int = _SEL_IDLE
    type: SelectionType = SelectionType.REGULAR
    snap: SnapMode = SnapMode.NONE
    ob: _Point = field(default_factory=_Point)
    oe: _Point = field(default_factory=_Point)
    nb: _Point = field(default_factory=_Point)
    ne: _Point = field(default_factory=_Point)
    alt: bool = False

    def move(self, n: int) -> None:
        self.ob.y += n
        self.nb.y += n
        self.oe.y += n
        self.ne.y += n


@dataclass
class Cursor:
    """Cursor position, drawing attributes and pending-wrap state."""

    x: int = 0
    y: int = 0
    attr: Glyph = field(default_factory=Glyph)
    wrap_next: bool = False

    def copy(self) -> "Cursor":
        return Cursor(self.x, self.y, self.attr.copy(), self.wrap_next)


def _blank_line(cols: int) -> list[Glyph]:
    return [Glyph() for _ in range(cols)]


class Screen:
    """Visible lines, history ring and the alternate screen."""

    def __init__(self, cols: int, rows: int, hist_size: int = HISTSIZE,
                 word_delimiters: str = WORD_DELIMITERS,
                 tab_spaces: int = TAB_SPACES) -> None:
        self.cols = cols
        self.rows = rows
        self.hist_size = hist_size
        self.word_delimiters = word_delimiters
        self.tab_spaces = tab_spaces
        self.lines = [_blank_line(cols) for _ in range(rows)]
        self._alt_lines = [_blank_line(cols) for _ in range(rows)]
        self._alt_cols = cols
        self._alt_rows = rows
        self.alt = False
        self.hist = [_blank_line(cols) for _ in range(hist_size)]
        self.histi = 0
        self.histf = 0
        self.scr = 0
        self.top = 0
        self.bot = rows - 1
        self.cursor = Cursor()
        self._saved = [Cursor(), Cursor()]
        self.wrap_cwidth = [1, 1]
        self.sel = Selection()
        self.dirty = [True] * rows
        self.tabs = [i > 0 and i % tab_spaces == 0 for i in range(cols)]

    # line access

    def line(self, y: int) -> list[Glyph]:
        """Line y of the scrolled view; negative offsets reach into history."""
        if y < self.scr:
            return self.hist[(self.histi + y - self.scr + 1 + self.hist_size) % self.hist_size]
        return self.lines[y - self.scr]

    def line_abs(self, y: int) -> list[Glyph]:
        """Line y of the unscrolled screen; negative y reaches into history."""
        if y < 0:
            return self.hist[(self.histi + y + 1 + self.hist_size) % self.hist_size]
        return self.lines[y]

    def line_len(self, line: list[Glyph]) -> int:
        """Length of the line up to its last meaningful cell."""
        i = self.cols - 1
        if self.alt:
            while i >= 0 and not (line[i].mode & Attr.WRAP) and line[i].u == BLANK:
                i -= 1
        else:
            while i >= 0 and not (line[i].mode & (Attr.SET | Attr.WRAP)):
                i -= 1
        return i + 1

    def is_wrapped(self, line: list[Glyph]) -> bool:
        """Tell whether the line continues on the next one."""
        n = self.line_len(line)
        return n > 0 and bool(line[n - 1].mode & Attr.WRAP)

    # dirtiness and cursor

    def _full_dirty(self) -> None:
        self.dirty = [True] * len(self.dirty)

    def _set_dirty(self, top: int, bot: int) -> None:
        top = max(0, min(top, self.rows - 1))
        bot = max(0, min(bot, self.rows - 1))
        for y in range(top, bot + 1):
            if y < len(self.dirty):
                self.dirty[y] = True

    def _clear_glyph(self, g: Glyph, use_cursor_attr: bool) -> None:
        if use_cursor_attr:
            g.clear(self.cursor.attr.fg, self.cursor.attr.bg)
        else:
            g.clear(DEFAULT_FG, DEFAULT_BG)

    def _update_wrap_next(self, alt: int, col: int) -> None:
        c = self.cursor
        if c.wrap_next and c.x + self.wrap_cwidth[alt] < col:
            c.x += self.wrap_cwidth[alt]
            c.wrap_next = False

    def _save_cursor(self) -> None:
        self._saved[int(self.alt)] = self.cursor.copy()

    def _load_cursor(self) -> None:
        c = self._saved[int(self.alt)].copy()
        c.x = max(0, min(c.x, self.cols - 1))
        c.y = max(0, min(c.y, self.rows - 1))
        self.cursor = c

    # editing

    def clear_region(self, x1: int, y1: int, x2: int, y2: int,
                     use_cursor_attr: bool = True) -> None:
        """Blank the cells of the rectangle, dropping an overlapping selection."""
        if self.region_selected(x1 + self.scr, y1 + self.scr, x2 + self.scr, y2 + self.scr):
            self._sel_remove()
        for y in range(y1, y2 + 1):
            self.dirty[y] = True
            for x in range(x1, x2 + 1):
                self._clear_glyph(self.lines[y][x], use_cursor_attr)

    def delete_chars(self, n: int) -> None:
        """Delete n cells at the cursor, shifting the rest of the line left."""
        if n <= 0:
            return
        dst = self.cursor.x
        src = min(self.cursor.x + n, self.cols)
        size = self.cols - src
        line = self.lines[self.cursor.y]
        if size > 0:
            line[dst:dst + size] = line[src:src + size]
            line[dst + size:] = [Glyph() for _ in range(self.cols - dst - size)]
        self.clear_region(dst + size, self.cursor.y, self.cols - 1, self.cursor.y, True)

    def insert_blanks(self, n: int) -> None:
        """Insert n blank cells at the cursor, shifting the line right."""
        if n <= 0:
            return
        dst = min(self.cursor.x + n, self.cols)
        src = self.cursor.x
        size = self.cols - dst
        line = self.lines[self.cursor.y]
        if size > 0:
            moved = line[src:src + size]
            line[src:dst] = [Glyph() for _ in range(dst - src)]
            line[dst:dst + size] = moved
        self.clear_region(src, self.cursor.y, dst - 1, self.cursor.y, True)

    # scrolling

    def scroll_up(self, top: int, bot: int, n: int,
                  mode: ScrollMode = ScrollMode.SAVEHIST) -> None:
        """Scroll lines top..bot up by n, saving lines to history when possible."""
        alt = self.alt
        savehist = not alt and top == 0 and mode != ScrollMode.NOSAVEHIST
        scr = 0 if alt else self.scr
        if n <= 0:
            return
        n = min(n, bot - top + 1)
        s = 0
        if savehist:
            for i in range(n):
                self.histi = (self.histi + 1) % self.hist_size
                temp = self.hist[self.histi]
                if len(temp) != self.cols:
                    temp = _blank_line(self.cols)
                for g in temp:
                    self._clear_glyph(g, True)
                self.hist[self.histi] = self.lines[i]
                self.lines[i] = temp
            self.histf = min(self.histf + n, self.hist_size)
            s = n
            if self.scr:
                j = self.scr
                self.scr = min(j + n, self.hist_size)
                s = j + n - self.scr
            if mode != ScrollMode.RESIZE:
                self._full_dirty()
        else:
            self.clear_region(0, top, self.cols - 1, top + n - 1, True)
            self._set_dirty(top + scr, bot + scr)
        for i in range(top, bot - n + 1):
            self.lines[i], self.lines[i + n] = self.lines[i + n], self.lines[i]
        if self.sel.ob.x != -1 and self.sel.alt == alt:
            if not savehist:
                self._sel_scroll(top, bot, -n)
            elif s > 0:
                self.sel.move(-s)
                if -self.scr + self.sel.nb.y < -self.histf:
                    self._sel_remove()

    def scroll_down(self, top: int, n: int) -> None:
        """Scroll lines top..bottom margin down by n."""
        bot = self.bot
        scr = 0 if self.alt else self.scr
        if n <= 0:
            return
        n = min(n, bot - top + 1)
        self._set_dirty(top + scr, bot + scr)
        self.clear_region(0, bot - n + 1, self.cols - 1, bot, True)
        for i in range(bot, top + n - 1, -1):
            self.lines[i], self.lines[i - n] = self.lines[i - n], self.lines[i]
        if self.sel.ob.x != -1 and self.sel.alt == self.alt:
            self._sel_scroll(top, bot, n)

    def kscroll_up(self, n: int) -> None:
        """Scroll the view n lines back into history; negative n is a fraction of a page."""
        if not self.histf or self.alt:
            return
        if n < 0:
            n = max(self.rows // -n, 1)
        if self.scr + n <= self.histf:
            self.scr += n
        else:
            n = self.histf - self.scr
            self.scr = self.histf
        if self.sel.ob.x != -1 and not self.sel.alt:
            self.sel.move(n)
        self._full_dirty()

    def kscroll_down(self, n: int) -> None:
        """Scroll the view n lines towards the live screen."""
        if not self.scr or self.alt:
            return
        if n < 0:
            n = max(self.rows // -n, 1)
        if n <= self.scr:
            self.scr -= n
        else:
            n = self.scr
            self.scr = 0
        if self.sel.ob.x != -1 and not self.sel.alt:
            self.sel.move(-n)
        self._full_dirty()

    def _rscroll_down(self, n: int) -> None:
        n = min(n, self.histf)
        if n <= 0:
            return
        i = self.cursor.y + n
        while i >= n:
            self.lines[i], self.lines[i - n] = self.lines[i - n], self.lines[i]
            i -= 1
        while i >= 0:
            self.lines[i], self.hist[self.histi] = self.hist[self.histi], self.lines[i]
            self.histi = (self.histi - 1 + self.hist_size) % self.hist_size
            i -= 1
        self.cursor.y += n
        self.histf -= n
        i = self.scr - n
        if i >= 0:
            self.scr = i
        else:
            self.scr = 0
            if self.sel.ob.x != -1 and not self.sel.alt:
                self.sel.move(-i)

    # resizing

    def _reflow(self, col: int, row: int) -> None:
        c = self.cursor
        oce = c.y
        while oce < self.rows - 1 and self.is_wrapped(self.lines[oce]):
            oce += 1
        nlines = self.hist_size + row
        buf: list[Optional[list[Glyph]]] = [None] * nlines
        ox, oy, nx, ny = 0, -self.histf, 0, -1
        cy = -1
        line: list[Glyph] = []
        length = 0
        bufline: list[Glyph] = []
        while True:
            if not nx:
                ny += 1
                if ny < nlines:
                    buf[ny] = _blank_line(col)
            if not ox:
                line = self.line_abs(oy)
                length = self.line_len(line)
            if oy == c.y:
                if not ox:
                    length = max(length, c.x + 1)
                if cy < 0 and c.x - ox < col - nx:
                    c.x = nx + c.x - ox
                    cy = ny
                    self._update_wrap_next(0, col)
            bufline = buf[ny % nlines]
            if col - nx > length - ox:
                bufline[nx:nx + length - ox] = [g.copy() for g in line[ox:length]]
                nx += length - ox
                if length == 0 or not (line[length - 1].mode & Attr.WRAP):
                    for g in bufline[nx:col]:
                        g.clear()
                    nx = 0
                elif nx > 0:
                    bufline[nx - 1].mode &= ~Attr.WRAP
                ox = 0
                oy += 1
            elif col - nx == length - ox:
                bufline[nx:col] = [g.copy() for g in line[ox:ox + col - nx]]
                ox = 0
                oy += 1
                nx = 0
            else:
                bufline[nx:col] = [g.copy() for g in line[ox:ox + col - nx]]
                if bufline[col - 1].mode & Attr.WIDE:
                    bufline[col - 2].mode |= Attr.WRAP
                    bufline[col - 1].clear()
                    ox -= 1
                else:
                    bufline[col - 1].mode |= Attr.WRAP
                ox += col - nx
                nx = 0
            if oy > oce:
                break
        if nx:
            for g in bufline[nx:col]:
                g.clear()

        new_lines: list = self.lines[:row] + [None] * max(0, row - self.rows)
        buflen = min(ny + 1, nlines)
        bot = min(ny, row - 1)
        scr = max(row - self.rows, 0)
        nce = min(oce + scr, bot)
        c.y = nce - (ny - cy)
        if c.y < 0:
            j = nce
            nce = min(nce - c.y, bot)
            c.y += nce - j
            while c.y < 0:
                ny -= 1
                buflen -= 1
                c.y += 1
        i = row - 1
        while i > nce:
            new_lines[i] = _blank_line(col)
            i -= 1
        while i >= 0:
            new_lines[i] = buf[ny % nlines]
            i -= 1
            ny -= 1
            buflen -= 1
        while buflen > 0 and i >= -self.hist_size:
            j = (self.histi + i + 1 + self.hist_size) % self.hist_size
            self.hist[j] = buf[ny % nlines]
            i -= 1
            ny -= 1
            buflen -= 1
        self.histf = -i - 1
        self.scr = min(self.scr, self.histf)
        while i >= -self.hist_size:
            j = (self.histi + i + 1 + self.hist_size) % self.hist_size
            old = self.hist[j]
            self.hist[j] = old[:col] + _blank_line(max(0, col - len(old)))
            i -= 1
        self.lines = new_lines

    def _resize_default(self, col: int, row: int) -> None:
        if self.cols == col and self.rows == row:
            self._full_dirty()
            return
        if col != self.cols:
            if not self.sel.alt:
                self._sel_remove()
            self._reflow(col, row)
        else:
            if self.cursor.y >= row:
                self.scroll_up(0, self.rows - 1, self.cursor.y - row + 1, ScrollMode.RESIZE)
                self.cursor.y = row - 1
            self.lines = self.lines[:row]
            self.lines += [_blank_line(col) for _ in range(row - len(self.lines))]
            self._rscroll_down(row - self.rows)
        self.cols, self.rows = col, row
        self.top, self.bot = 0, row - 1
        self._full_dirty()

    def _resize_alt(self, col: int, row: int) -> None:
        if self.cols == col and self.rows == row:
            self._full_dirty()
            return
        if self.sel.alt:
            self._sel_remove()
        shift = max(0, self.cursor.y - row + 1)
        if shift > 0:
            self.lines = self.lines[shift:]
            self.cursor.y = row - 1
        self.lines = [ln[:col] + _blank_line(max(0, col - len(ln)))
                      for ln in self.lines[:row]]
        self.lines += [_blank_line(col) for _ in range(row - len(self.lines))]
        if self.cursor.x >= col:
            self.cursor.wrap_next = False
            self.cursor.x = col - 1
        else:
            self._update_wrap_next(1, col)
        self.cols, self.rows = col, row
        self.top, self.bot = 0, row - 1
        self._full_dirty()

    def resize(self, cols: int, rows: int) -> None:
        """Change the grid size; the main screen reflows wrapped lines."""
        old = self.cols
        self.dirty = (self.dirty + [True] * rows)[:rows]
        self.tabs = (self.tabs + [False] * cols)[:cols]
        if cols > old:
            bp = old
            while True:
                bp -= 1
                if not (bp > 0 and not self.tabs[bp]):
                    break
            bp += self.tab_spaces
            while bp < cols:
                self.tabs[bp] = True
                bp += self.tab_spaces
        if self.alt:
            self._resize_alt(cols, rows)
        else:
            self._resize_default(cols, rows)

    # screens

    def swap_screen(self) -> None:
        """Exchange the main and alternate screens."""
        self.lines, self._alt_lines = self._alt_lines, self.lines
        self.cols, self._alt_cols = self._alt_cols, self.cols
        self.rows, self._alt_rows = self._alt_rows, self.rows
        self.alt = not self.alt

    def load_alt_screen(self, clear: bool, save_cursor: bool) -> None:
        """Switch to the alternate screen, sized like the current one."""
        if save_cursor:
            self._save_cursor()
        if not self.alt:
            col, row = self.cols, self.rows
            self.kscroll_down(self.scr)
            self.swap_screen()
            self._resize_alt(col, row)
        if clear:
            self.clear_region(0, 0, self.cols - 1, self.rows - 1, True)

    def load_default_screen(self, clear: bool, load_cursor: bool) -> None:
        """Switch back to the main screen, sized like the current one."""
        was_alt = self.alt
        col, row = self.cols, self.rows
        if was_alt:
            if clear:
                self.clear_region(0, 0, self.cols - 1, self.rows - 1, True)
            self.swap_screen()
        if load_cursor:
            self._load_cursor()
        if was_alt:
            self._resize_default(col, row)

    # selection

    def region_selected(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        """Tell whether the selection touches the given region."""
        s = self.sel
        if (s.ob.x == -1 or s.mode == _SEL_EMPTY or s.alt != self.alt
                or s.nb.y > y2 or s.ne.y < y1):
            return False
        if s.type == SelectionType.RECTANGULAR:
            return s.nb.x <= x2 and s.ne.x >= x1
        return (s.nb.y != y2 or s.nb.x <= x2) and (s.ne.y != y1 or s.ne.x >= x1)

    def selected(self, x: int, y: int) -> bool:
        """Tell whether the cell is selected."""
        return self.region_selected(x, y, x, y)

    def _is_delim(self, u: int) -> bool:
        return u != 0 and chr(u) in self.word_delimiters

    def _snap(self, x: int, y: int, direction: int) -> tuple[int, int]:
        rtop, rbot = 0, self.rows - 1
        if not self.alt:
            rtop += -self.histf + self.scr
            rbot += self.scr
        if self.sel.snap == SnapMode.WORD:
            def width(yy: int) -> int:
                return self.cols - 1 if self.line(yy)[self.cols - 2].mode & Attr.WRAP else self.cols
            maxlen = width(y)
            x = max(0, min(x, maxlen - 1))
            prev = self.line(y)[x]
            prevdelim = self._is_delim(prev.u)
            while True:
                newx, newy = x + direction, y
                if not 0 <= newx <= maxlen - 1:
                    newy += direction
                    if not rtop <= newy <= rbot:
                        break
                    if not self.is_wrapped(self.line(y if direction > 0 else newy)):
                        break
                    maxlen = width(newy)
                    newx = 0 if direction > 0 else maxlen - 1
                g = self.line(newy)[newx]
                delim = self._is_delim(g.u)
                if not (g.mode & Attr.WDUMMY) and (
                        delim != prevdelim or (delim and g.u != prev.u)):
                    break
                x, y = newx, newy
                if not (g.mode & Attr.WDUMMY):
                    prev, prevdelim = g, delim
        elif self.sel.snap == SnapMode.LINE:
            x = 0 if direction < 0 else self.cols - 1
            if direction < 0:
                while y > rtop and self.is_wrapped(self.line(y - 1)):
                    y -= 1
            elif direction > 0:
                while y < rbot and self.is_wrapped(self.line(y)):
                    y += 1
        return x, y

    def _normalize(self) -> None:
        s = self.sel
        if s.type == SelectionType.REGULAR and s.ob.y != s.oe.y:
            s.nb.x = s.ob.x if s.ob.y < s.oe.y else s.oe.x
            s.ne.x = s.oe.x if s.ob.y < s.oe.y else s.ob.x
        else:
            s.nb.x = min(s.ob.x, s.oe.x)
            s.ne.x = max(s.ob.x, s.oe.x)
        s.nb.y = min(s.ob.y, s.oe.y)
        s.ne.y = max(s.ob.y, s.oe.y)
        s.nb.x, s.nb.y = self._snap(s.nb.x, s.nb.y, -1)
        s.ne.x, s.ne.y = self._snap(s.ne.x, s.ne.y, 1)
        if s.type == SelectionType.RECTANGULAR:
            return
        s.nb.x = min(s.nb.x, self.line_len(self.line(s.nb.y)))
        if self.line_len(self.line(s.ne.y)) <= s.ne.x:
            s.ne.x = self.cols - 1

    def select_start(self, x: int, y: int, snap: SnapMode = SnapMode.NONE) -> None:
        """Begin a selection at the cell (x, y)."""
        self.select_clear()
        s = self.sel
        s.mode = _SEL_EMPTY
        s.type = SelectionType.REGULAR
        s.alt = self.alt
        s.snap = SnapMode(snap)
        s.ob = _Point(x, y)
        s.oe = _Point(x, y)
        self._normalize()
        if s.snap != SnapMode.NONE:
            s.mode = _SEL_READY
        self._set_dirty(s.nb.y, s.ne.y)

    def select_extend(self, x: int, y: int,
                      sel_type: SelectionType = SelectionType.REGULAR,
                      done: bool = False) -> None:
        """Move the selection end to (x, y); done finishes the selection."""
        s = self.sel
        if s.mode == _SEL_IDLE:
            return
        if done and s.mode == _SEL_EMPTY:
            self.select_clear()
            return
        old_nb, old_ne = s.nb.y, s.ne.y
        s.oe = _Point(x, y)
        self._normalize()
        s.type = SelectionType(sel_type)
        self._set_dirty(min(old_nb, s.nb.y), max(old_ne, s.ne.y))
        s.mode = _SEL_IDLE if done else _SEL_READY

    def _sel_remove(self) -> None:
        self.sel.mode = _SEL_IDLE
        self.sel.ob.x = -1

    def select_clear(self) -> None:
        """Drop the selection."""
        if self.sel.ob.x == -1:
            return
        self._sel_remove()
        self._set_dirty(self.sel.nb.y, self.sel.ne.y)

    def _sel_scroll(self, top: int, bot: int, n: int) -> None:
        top += self.scr
        bot += self.scr
        s = self.sel
        nb_in = top <= s.nb.y <= bot
        if nb_in != (top <= s.ne.y <= bot):
            self.select_clear()
        elif nb_in:
            s.move(n)
            if s.nb.y < top or s.ne.y > bot:
                self.select_clear()

    @staticmethod
    def _glyphs_text(cells: list[Glyph]) -> str:
        return "".join(chr(g.u) for g in cells if not (g.mode & Attr.WDUMMY))

    def get_selection(self) -> Optional[str]:
        """Text of the selection, rows ending in newlines unless they wrap."""
        s = self.sel
        if s.ob.x == -1 or s.alt != self.alt:
            return None
        out: list[str] = []
        for y in range(s.nb.y, s.ne.y + 1):
            line = self.line(y)
            linelen = self.line_len(line)
            if linelen == 0:
                out.append("\n")
                continue
            if s.type == SelectionType.RECTANGULAR:
                start, lastx = s.nb.x, s.ne.x
            else:
                start = s.nb.x if s.nb.y == y else 0
                lastx = s.ne.x if s.ne.y == y else self.cols - 1
            last = min(lastx, linelen - 1)
            out.append(self._glyphs_text(line[start:last + 1]))
            if (y < s.ne.y or lastx >= linelen) and (
                    not (line[last].mode & Attr.WRAP)
                    or s.type == SelectionType.RECTANGULAR):
                out.append("\n")
        return "".join(out)

    def line_text(self, y: int) -> str:
        """Text of visible row y, with a newline unless the row wraps."""
        line = self.lines[y]
        last = self.cols - 1
        while last > 0 and not (line[last].mode & (Attr.SET | Attr.WRAP)):
            last -= 1
        text = self._glyphs_text(line[:last + 1])
        if not (line[last].mode & Attr.WRAP):
            text += "\n"
        return text