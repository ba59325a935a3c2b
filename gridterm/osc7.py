"""Parsing of the working-directory URI reported by shells through OSC 7."""

from __future__ import annotations

import os
import re
import socket

PATH_MAX = 4096
HOST_NAME_MAX = 255

_ESCAPE = re.compile(rb"%([0-9A-Fa-f]{2})")


class Osc7Error(ValueError):
    """The OSC 7 URI cannot be used as a working directory."""


def _percent_decode(uri: bytes) -> bytes:
    decoded = _ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), uri)
    if len(decoded) >= PATH_MAX:
        raise Osc7Error("uri is too long")
    return decoded


def parse_osc7_cwd(uri: str, hostname: str | None = None) -> str:
    """Return the directory named by a file:// URI.

    An empty URI, or one without a path, yields "" (the directory is unset).
    The path is accepted only when the host part is empty, "localhost" or
    equal to ``hostname`` (by default the name of this machine).
    """
    raw = os.fsencode(uri)
    if not raw:
        return ""
    decoded = _percent_decode(raw)
    if not decoded.startswith(b"file:"):
        raise Osc7Error(f"scheme is not supported: {uri!r}")
    if decoded[5:7] != b"//":
        raise Osc7Error(f"invalid uri: {uri!r}")
    auth_start = 7
    path_start = decoded.find(b"/", auth_start)
    if path_start < 0:
        return ""
    authority = decoded[auth_start:path_start]
    _, at, after_user = authority.partition(b"@")
    host = after_user if at else authority
    host = host.partition(b":")[0]
    if hostname is None:
        try:
            hostname = socket.gethostname()
        except OSError:
            hostname = ""
    this_host = os.fsencode(hostname)[:HOST_NAME_MAX]
    if host and host != b"localhost" and host != this_host:
        raise Osc7Error(f"host is not local: {uri!r}")
    return os.fsdecode(decoded[path_start:])