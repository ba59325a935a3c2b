"""Entering characters by hexadecimal code point (ISO 14755)."""

from __future__ import annotations

import re
import subprocess
from typing import Callable, Optional

ISO14755_COMMAND = 'dmenu -w "$WINDOWID" -p codepoint: </dev/null'
UTF_INVALID = 0xFFFD
_MAX_CHARS = 7
_READ_LIMIT = 8
_ULONG_MAX = (1 << 64) - 1

_HEX_NUMBER = re.compile(
    r"[ \t\n\v\f\r]*(?P<sign>[+-]?)(?:0[xX](?=[0-9A-Fa-f]))?(?P<digits>[0-9A-Fa-f]+)"
)


def utf8_encode(u: int) -> bytes:
    """Encode a code point as UTF-8, replacing invalid ones with U+FFFD."""
    if not 0 <= u <= 0x10FFFF or 0xD800 <= u <= 0xDFFF:
        u = UTF_INVALID
    return chr(u).encode("utf-8")


def parse_codepoint(text: str) -> Optional[int]:
    """Read a hexadecimal code point as typed by the user; None when unusable."""
    if not text or text[0] == "-" or len(text) > _MAX_CHARS:
        return None
    match = _HEX_NUMBER.match(text)
    if match:
        if match.group("sign") == "-":
            return None
        value = int(match.group("digits"), 16)
        rest = text[match.end():]
    else:
        value = 0
        rest = text
    if value >= _ULONG_MAX:
        return None
    if rest and rest[0] != "\n":
        return None
    return value


def iso14755(command: str = ISO14755_COMMAND,
             write: Callable[[bytes], object] | None = None) -> Optional[bytes]:
    """Ask a shell command for a code point and send its UTF-8 encoding to write."""
    try:
        result = subprocess.run(
            command, shell=True, stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE, check=False,
        )
    except OSError:
        return None
    output = result.stdout
    if not output:
        return None
    newline = output.find(b"\n")
    end = newline + 1 if 0 <= newline < _READ_LIMIT else _READ_LIMIT
    value = parse_codepoint(output[:end].decode("latin-1"))
    if value is None:
        return None
    data = utf8_encode(value)
    if write is not None:
        write(data)
    return data