import io
import struct

import pytest

from gridterm.farbfeld import FarbfeldError, load_farbfeld, read_farbfeld


def _encode(width, height, pixels):
    body = b"".join(struct.pack(">HHHH", *p) for p in pixels)
    return b"farbfeld" + struct.pack(">II", width, height) + body


PIXELS = [
    (0x1234, 0x5678, 0x9ABC, 0xDEF0),
    (0xFFFF, 0x0000, 0x0000, 0xFFFF),
    (0x0000, 0x0000, 0xFFFF, 0x0000),
    (0x0101, 0x0202, 0x0303, 0x0404),
]


def test_round_trip_from_stream():
    image = read_farbfeld(io.BytesIO(_encode(2, 2, PIXELS)))
    assert image.width == 2
    assert image.height == 2
    assert list(image.pixels) == PIXELS


def test_load_from_path(tmp_path):
    path = tmp_path / "bg.ff"
    path.write_bytes(_encode(4, 1, PIXELS))
    image = load_farbfeld(path)
    assert (image.width, image.height) == (4, 1)
    assert list(image.pixels) == PIXELS


def test_missing_file(tmp_path):
    with pytest.raises(FarbfeldError):
        load_farbfeld(tmp_path / "absent.ff")


def test_short_header():
    with pytest.raises(FarbfeldError):
        read_farbfeld(io.BytesIO(b"farbfeld\x00\x00"))


def test_bad_magic():
    data = b"farbfelt" + struct.pack(">II", 0, 0)
    with pytest.raises(FarbfeldError):
        read_farbfeld(io.BytesIO(data))


def test_truncated_data():
    data = _encode(2, 2, PIXELS)[:-1]
    with pytest.raises(FarbfeldError):
        read_farbfeld(io.BytesIO(data))


def test_empty_image():
    image = read_farbfeld(io.BytesIO(_encode(0, 0, [])))
    assert image.pixels == ()
    assert image.to_netwm_icon() == [0, 0]


def test_x_pixels_take_high_bytes():
    image = read_farbfeld(io.BytesIO(_encode(2, 2, PIXELS)))
    values = image.to_x_pixels()
    assert len(values) == len(PIXELS)
    for value, (r, g, b, a) in zip(values, PIXELS):
        assert value >> 24 == a >> 8
        assert (value >> 16) & 0xFF == r >> 8
        assert (value >> 8) & 0xFF == g >> 8
        assert value & 0xFF == b >> 8


def test_x_pixels_pinned():
    image = read_farbfeld(io.BytesIO(_encode(2, 2, PIXELS)))
    values = image.to_x_pixels()
    assert values[1] == 0xFFFF0000
    assert values[2] == 0x000000FF


def test_netwm_icon_layout():
    image = read_farbfeld(io.BytesIO(_encode(4, 1, PIXELS)))
    icon = image.to_netwm_icon()
    assert icon[:2] == [4, 1]
    assert icon[2:] == image.to_x_pixels()