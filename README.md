# gridterm

The parts of a terminal emulator that do not need a display. It provides a character
grid with scrollback, reflow of wrapped lines on resize, and mouse-style selection. On
top of that grid it adds a vi-like keyboard selection mode and URL detection. It also
includes the rectangle geometry for box-drawing, block and braille characters, plus
small helpers for OSC 7 working-directory URIs, farbfeld images, X resource strings,
code point entry, synchronized updates and starting external programs.

## Install

```
pip install gridterm
```

## Modules

- `gridterm.glyph`: `Glyph` (a cell with code point `u`, `mode`, `fg`, `bg`; `clear()`, `copy()`) and the `Attr` flag set.
- `gridterm.screen`: `Screen(cols, rows, hist_size=2000, ...)`, with a main and an alternate screen and a history ring.
  - Line access: `line()`, `line_abs()`, `line_len()`, `is_wrapped()`.
  - Editing: `clear_region()`, `delete_chars()`, `insert_blanks()`.
  - Scrolling: `scroll_up()`, `scroll_down()`, `kscroll_up()`, `kscroll_down()`.
  - Sizing and screens: `resize()` reflows wrapped lines on the main screen; `swap_screen()`, `load_alt_screen()`, `load_default_screen()`.
  - Selection: `select_start()`, `select_extend()`, `select_clear()`, `selected()`, `region_selected()` and `get_selection()`; `line_text()` returns one visible row.
  - Supporting types: `Cursor`, `Selection`, `ScrollMode`, `SelectionType`, `SnapMode`.
- `gridterm.kbselect`: `KeyboardSelect(screen)` drives a cursor over a `Screen` with keys given by their keysym names (`handle_key("j")`, `handle_key("slash")`, ...).
  - It covers movement, counts, word motion, find/till, search with highlighting, and character and line selection.
  - Copies go to `clipboard` and to an optional `on_copy` callback.
  - `status_bar(y)` returns the cells of the mode indicator and search prompt.
- `gridterm.boxdraw`: `is_boxdraw()`, `box_index()` and `box_rects()`, which turns a shape into `Rect`s within a cell, plus `shade_color()` for the shade blocks.
- `gridterm.urls`:
  - `detect_url(lines, col, row)` returns the http(s) URL under a cell, following wrapped lines.
  - `copy_url(lines, ...)` returns the last URL before a position, scanning rows upward.
  - Both return a `UrlMatch`.
- `gridterm.osc7`: `parse_osc7_cwd(uri, hostname=None)` returns the path of a local `file://` URI, or `""` when unset. It raises `Osc7Error` otherwise.
- `gridterm.farbfeld`: `read_farbfeld(stream)` and `load_farbfeld(path)` return a `FarbfeldImage`. The image offers `to_x_pixels()` and `to_netwm_icon()`. Bad data raises `FarbfeldError`.
- `gridterm.xresources`:
  - `parse_resources(text)` parses resource-manager text.
  - `resource_load(db, name, rtype)` looks up one `st.<name>` / `St.<name>` value.
  - `config_init(db, prefs)` returns the values of the `ResourcePref`s that are set, converted as `ResourceType` says.
- `gridterm.codepoint`:
  - `parse_codepoint(text)` reads a hexadecimal code point.
  - `utf8_encode(u)` encodes a code point as UTF-8.
  - `iso14755(command, write)` runs a shell command (dmenu by default) and passes the encoded character to `write`.
- `gridterm.sync`: `SyncState` with `begin()`, `end()` and `in_sync(timeout_ms)`.
- `gridterm.colors`: `clamp()`, `change_alpha()` and `invert_color()`.
- `gridterm.launch`:
  - `screen_text(lines)` encodes the screen as text; `line_length()` is the per-row length it uses.
  - `external_pipe(argv, lines)` feeds that text to a program.
  - `open_copied(opener, clip)` runs `opener "clip"` through the shell.
  - `plumb(command, selection, cwd)` starts a command on a selection.
  - `subprocess_cwd(pid)` returns the `/proc` path of a process's working directory.
  - `new_term(executable, cwd)` starts a detached program.

## Example

```python
from gridterm.glyph import Attr, Glyph
from gridterm.screen import Screen

screen = Screen(10, 3)
for x, ch in enumerate("hello"):
    screen.lines[0][x] = Glyph(ord(ch), Attr.SET)

screen.select_start(0, 0)
screen.select_extend(4, 0)
screen.select_extend(4, 0, done=True)
print(screen.get_selection())  # hello
```

```python
from gridterm.boxdraw import box_index, box_rects

for rect in box_rects(0, 0, 8, 16, box_index(0x253C)):
    print(rect)
```

## What it does not do

gridterm has no window, renderer or font handling. `box_rects` gives geometry, but
something else must draw it. It opens no pseudo-terminal, starts no shell and does not
parse escape sequences: cells are written into `Screen.lines` by the caller. There is no
command-line program.

## Tests

```
pip install -e .[test]
pytest
```