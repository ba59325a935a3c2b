"""Handing screen contents and selections to other programs."""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Optional, Sequence, Union

from .codepoint import utf8_encode
from .glyph import Attr, Glyph

MAX_COMMAND = 2048

Line = Sequence[Glyph]


def line_length(line: Line) -> int:
    """Number of cells up to the last one that was written or carries a wrap mark."""
    i = len(line) - 1
    while i >= 0 and not (line[i].mode & (Attr.SET | Attr.WRAP)):
        i -= 1
    return i + 1


def screen_text(lines: Sequence[Line]) -> bytes:
    """Encode the screen as UTF-8 lines, joining rows that wrap."""
    out = bytearray()
    newline = False
    for line in lines:
        last = min(line_length(line) + 1, len(line)) - 1
        if last < 0:
            break
        for cell in line[:last + 1]:
            out += utf8_encode(cell.u)
        newline = bool(line[last].mode & Attr.WRAP)
        if newline:
            continue
        out += b"\n"
    if newline:
        out += b"\n"
    return bytes(out)


def external_pipe(argv: Sequence[str], lines: Sequence[Line]) -> subprocess.Popen:
    """Start argv and feed the screen text to its standard input."""
    process = subprocess.Popen(list(argv), stdin=subprocess.PIPE)
    try:
        process.stdin.write(screen_text(lines))
    except BrokenPipeError:
        pass
    finally:
        try:
            process.stdin.close()
        except BrokenPipeError:
            pass
    return process


def open_copied(opener: str, clip: Optional[str]) -> Optional[str]:
    """Run `opener "clip"` in the background through the shell; return the command."""
    if not clip:
        print("Warning: nothing copied to clipboard", file=sys.stderr)
        return None
    size = MAX_COMMAND + len(clip) + 5
    command = f'{opener} "{clip}"&'[:size - 1]
    subprocess.run(command, shell=True, check=False)
    return command


def subprocess_cwd(pid: int) -> str:
    """Path naming the working directory of process pid."""
    return f"/proc/{pid}/cwd"


def plumb(command: str, selection: Optional[str],
          cwd: str) -> Optional[subprocess.Popen]:
    """Start command with the selection as its argument, inside cwd."""
    if selection is None:
        return None
    try:
        return subprocess.Popen([command, selection], cwd=cwd)
    except OSError:
        return None


def new_term(executable: Union[str, Sequence[str]],
             cwd: Optional[str] = None) -> subprocess.Popen:
    """Start another terminal, detached, in cwd when that directory can be entered."""
    argv = [executable] if isinstance(executable, str) else list(executable)
    env = None
    workdir = None
    if cwd and os.path.isdir(cwd):
        workdir = cwd
        env = dict(os.environ, PWD=cwd)
    return subprocess.Popen(argv, cwd=workdir, env=env, start_new_session=True)