"""Character cells of the terminal grid."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntFlag

DEFAULT_FG = 258
DEFAULT_BG = 259
BLANK = 0x20


class Attr(IntFlag):
    """Attribute bits carried by a glyph."""

    NULL = 0
    BOLD = 1 << 0
    FAINT = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    REVERSE = 1 << 5
    INVISIBLE = 1 << 6
    STRUCK = 1 << 7
    WRAP = 1 << 8
    WIDE = 1 << 9
    WDUMMY = 1 << 10
    SELECTED = 1 << 11
    BOXDRAW = 1 << 12
    HIGHLIGHT = 1 << 13
    SET = 1 << 14
    FTCS_PROMPT = 1 << 15
    SIXEL = 1 << 16
    BOLD_FAINT = BOLD | FAINT


@dataclass
class Glyph:
    """One cell: a code point, its attributes and its colours."""

    u: int = BLANK
    mode: Attr = Attr.NULL
    fg: int = DEFAULT_FG
    bg: int = DEFAULT_BG

    @property
    def char(self) -> str:
        """The cell's code point as a string."""
        return chr(self.u)

    def clear(self, fg: int = DEFAULT_FG, bg: int = DEFAULT_BG) -> None:
        """Turn the cell into a blank with the given colours and no attributes."""
        self.fg = fg
        self.bg = bg
        self.mode = Attr.NULL
        self.u = BLANK

    def copy(self) -> "Glyph":
        """Return an independent copy of the cell."""
        return replace(self)