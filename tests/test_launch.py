import os
import stat
import sys

import pytest

from gridterm.glyph import Attr, Glyph
from gridterm.launch import (
    external_pipe,
    line_length,
    new_term,
    open_copied,
    plumb,
    screen_text,
    subprocess_cwd,
)


def make_line(text, width, wrap=False):
    line = [Glyph(u=ord(c), mode=Attr.SET) for c in text]
    line += [Glyph() for _ in range(width - len(text))]
    if wrap:
        line[-1].mode |= Attr.WRAP
    return line


def test_line_length_counts_set_cells():
    assert line_length(make_line("abc", 8)) == 3


def test_line_length_blank_line():
    assert line_length(make_line("", 6)) == 0


def test_line_length_wrap_mark_counts():
    assert line_length(make_line("", 6, wrap=True)) == 6


def test_screen_text_joins_wrapped_rows():
    lines = [make_line("abcd", 4, wrap=True), make_line("ef", 4)]
    assert screen_text(lines) == b"abcdef \n"


def test_screen_text_trailing_wrap_gets_newline():
    text = screen_text([make_line("abcd", 4, wrap=True)])
    assert text.endswith(b"\n")
    assert text.count(b"\n") == 1


def test_screen_text_one_line_per_row():
    lines = [make_line("x", 5) for _ in range(3)]
    assert screen_text(lines).count(b"\n") == len(lines)


def test_screen_text_empty():
    assert screen_text([]) == b""


def test_external_pipe_feeds_stdin(tmp_path):
    out = tmp_path / "out"
    lines = [make_line("hello", 8), make_line("\u00e9t\u00e9", 8)]
    script = f"import sys; open({str(out)!r}, 'wb').write(sys.stdin.buffer.read())"
    process = external_pipe([sys.executable, "-c", script], lines)
    assert process.wait(timeout=30) == 0
    assert out.read_bytes() == screen_text(lines)


def test_external_pipe_missing_program():
    with pytest.raises(OSError):
        external_pipe(["/nonexistent/program/for/test"], [make_line("a", 2)])


def test_open_copied_nothing():
    assert open_copied("true", None) is None


def test_open_copied_builds_command():
    assert open_copied("true", "http://example.com") == 'true "http://example.com"&'


def test_subprocess_cwd():
    assert subprocess_cwd(42) == "/proc/42/cwd"


def test_plumb_without_selection(tmp_path):
    assert plumb("true", None, str(tmp_path)) is None


def test_plumb_bad_directory(tmp_path):
    assert plumb("true", "sel", str(tmp_path / "missing")) is None


def test_plumb_runs_in_cwd(tmp_path):
    out = tmp_path / "out"
    tool = tmp_path / "tool.sh"
    tool.write_text(f"#!/bin/sh\nprintf '%s\\n' \"$1\" > {out}\npwd -P >> {out}\n")
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
    process = plumb(str(tool), "some selection", str(tmp_path))
    assert process.wait(timeout=30) == 0
    selection, directory = out.read_text().splitlines()
    assert selection == "some selection"
    assert directory == os.path.realpath(tmp_path)


def test_new_term_starts_in_cwd(tmp_path):
    out = tmp_path / "out"
    script = (
        "import os; "
        f"open({str(out)!r}, 'w').write(os.getcwd() + '\\n' + os.environ['PWD'])"
    )
    process = new_term([sys.executable, "-c", script], str(tmp_path))
    assert process.wait(timeout=30) == 0
    cwd, pwd = out.read_text().split("\n")
    assert os.path.realpath(cwd) == os.path.realpath(tmp_path)
    assert pwd == str(tmp_path)