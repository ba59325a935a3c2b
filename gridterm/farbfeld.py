"""Reading farbfeld images for window backgrounds and icons."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO

MAGIC = b"farbfeld"
HEADER_SIZE = 16
PIXEL_SIZE = 8


class FarbfeldError(ValueError):
    """The data is not a readable farbfeld image."""


@dataclass(frozen=True)
class FarbfeldImage:
    """A decoded image; pixels are (red, green, blue, alpha) 16-bit tuples, row by row."""

    width: int
    height: int
    pixels: tuple[tuple[int, int, int, int], ...]

    def to_x_pixels(self) -> list[int]:
        """Return 32-bit ARGB values built from the high byte of each channel."""
        return [
            (a >> 8) << 24 | (r >> 8) << 16 | (g >> 8) << 8 | (b >> 8)
            for r, g, b, a in self.pixels
        ]

    def to_netwm_icon(self) -> list[int]:
        """Return the cardinal list for _NET_WM_ICON: width, height, then ARGB pixels."""
        return [self.width, self.height, *self.to_x_pixels()]


def read_farbfeld(stream: BinaryIO) -> FarbfeldImage:
    """Decode a farbfeld image from a binary stream."""
    header = stream.read(HEADER_SIZE)
    if len(header) < HEADER_SIZE:
        raise FarbfeldError("Unexpected end of file reading header")
    if header[:len(MAGIC)] != MAGIC:
        raise FarbfeldError("Invalid magic value")
    width, height = struct.unpack(">II", header[len(MAGIC):])
    expected = width * height * PIXEL_SIZE
    data = stream.read(expected)
    if len(data) < expected:
        raise FarbfeldError("Unexpected end of file reading data")
    pixels = tuple(struct.iter_unpack(">HHHH", data))
    return FarbfeldImage(width, height, pixels)


def load_farbfeld(path: str | PathLike[str]) -> FarbfeldImage:
    """Open and decode the farbfeld file at path."""
    try:
        with open(path, "rb") as stream:
            return read_farbfeld(stream)
    except OSError as exc:
        raise FarbfeldError(f"could not load image: {exc}") from exc