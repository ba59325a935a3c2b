"""Finding URLs in the text of the terminal grid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .glyph import Attr, Glyph

URL_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789-._~:/?#@!$&'*+,;=%"
)
URL_PREFIXES = ("http://", "https://")

# Room on each side of the clicked cell in a 2048-byte buffer.
_BACK_LIMIT = 1025
_FORWARD_LIMIT = 1023

Lines = Sequence[Sequence[Glyph]]


@dataclass(frozen=True)
class UrlMatch:
    """A URL found on screen and the cells it covers (inclusive)."""

    url: str
    row: int
    col: int
    end_row: int
    end_col: int


def is_url_char(u: int) -> bool:
    """Tell whether code point u may appear inside a URL."""
    return u < 128 and chr(u) in URL_CHARS


def find_last_any(text: str, needles: Iterable[str]) -> Optional[int]:
    """Return the last index of text at which any of needles starts, or None."""
    needles = tuple(needles)
    for pos in range(len(text) - 1, -1, -1):
        if any(text.startswith(needle, pos) for needle in needles):
            return pos
    return None


def _row_text(line: Sequence[Glyph], end: int) -> str:
    text = "".join(chr(cell.u) for cell in line[:end])
    return text.partition("\0")[0]


def _trim_url(text: str) -> str:
    for pos, ch in enumerate(text):
        if not is_url_char(ord(ch)):
            return text[:pos]
    return text


def copy_url(lines: Lines, start_row: Optional[int] = None,
             start_col: Optional[int] = None, top: int = 0,
             bot: Optional[int] = None) -> Optional[UrlMatch]:
    """Find the last URL before (start_row, start_col), scanning rows upward and wrapping.

    Without a start position (or with start_row 0) the scan begins at the end
    of the bottom row.
    """
    if not lines:
        return None
    if bot is None:
        bot = len(lines) - 1
    cols = len(lines[0])
    has_start = start_row is not None and start_col is not None and start_row > 0
    row = start_row if has_start else bot
    row = min(max(row, top), bot)
    colend = start_col if has_start else cols
    colend = min(max(colend, 0), cols)

    for _ in range(bot + 2):
        text = _row_text(lines[row], colend)
        index = find_last_any(text, URL_PREFIXES)
        if index is not None:
            break
        row -= 1
        if row < top:
            row = bot
        colend = cols
    else:
        return None

    url = _trim_url(text[index:])
    return UrlMatch(url, row, index, row, index + len(url) - 1)


def _end_of_wrapped_line(line: Sequence[Glyph], cols: int) -> int:
    """Column of the wrap mark ending line, skipping trailing blanks; -1 if none."""
    col = cols - 1
    while col >= 0:
        if line[col].mode & Attr.WRAP:
            return col
        if line[col].u != ord(" "):
            break
        col -= 1
    return -1


def detect_url(lines: Lines, col: int, row: int,
               cols: Optional[int] = None) -> Optional[UrlMatch]:
    """Return the http(s) URL covering the cell at (col, row), following line wraps."""
    if not lines:
        return None
    if cols is None:
        cols = len(lines[0])
    max_row = len(lines) - 1

    if not is_url_char(lines[row][col].u):
        return None

    back: list[str] = []
    x, y = col, row
    x1, y1 = x, y
    while True:
        x1, y1 = x, y
        back.append(chr(lines[y][x].u))
        x -= 1
        if x < 0:
            y -= 1
            if y < 0:
                break
            x = _end_of_wrapped_line(lines[y], cols)
            if x < 0:
                break
        if len(back) >= _BACK_LIMIT or not is_url_char(lines[y][x].u):
            break

    head = "".join(reversed(back))
    if head[0] != "h":
        return None

    forward: list[str] = []
    x, y = col, row
    x2, y2 = x, y
    while True:
        x2, y2 = x, y
        cell = lines[y][x]
        forward.append(chr(cell.u))
        wrapped = bool(cell.mode & Attr.WRAP)
        x += 1
        if x >= cols or wrapped:
            x = 0
            y += 1
            if y > max_row or not wrapped:
                break
        if len(forward) >= _FORWARD_LIMIT or not is_url_char(lines[y][x].u):
            break

    url = head + "".join(forward[1:])
    if not url.startswith(URL_PREFIXES):
        return None
    return UrlMatch(url, y1, x1, y2, x2)