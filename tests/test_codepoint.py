import pytest

from gridterm.codepoint import iso14755, parse_codepoint, utf8_encode


@pytest.mark.parametrize("text, expected", [
    ("41\n", 0x41),
    ("41", 0x41),
    ("263a\n", 0x263A),
    ("0x263a\n", 0x263A),
    ("1F600\n", 0x1F600),
])
def test_valid_codepoints(text, expected):
    assert parse_codepoint(text) == expected


@pytest.mark.parametrize("text", ["", "-41", "12345678", "41 ", "zz", "41g\n"])
def test_rejected_codepoints(text):
    assert parse_codepoint(text) is None


def test_utf8_ascii():
    assert utf8_encode(0x41) == b"A"


def test_utf8_multibyte_round_trip():
    assert utf8_encode(0x263A).decode("utf-8") == "\u263a"
    assert utf8_encode(0x1F600).decode("utf-8") == "\U0001f600"


@pytest.mark.parametrize("u", [0xD800, 0xDFFF, 0x110000, -1])
def test_utf8_invalid_is_replacement(u):
    assert utf8_encode(u) == "\ufffd".encode("utf-8")


def test_iso14755_writes_encoded_character():
    written = []
    data = iso14755("echo 263a", written.append)
    assert data == "\u263a".encode("utf-8")
    assert written == [data]


def test_iso14755_rejects_long_input():
    written = []
    assert iso14755("echo 123456789", written.append) is None
    assert written == []


def test_iso14755_empty_output():
    written = []
    assert iso14755("true", written.append) is None
    assert written == []