"""Tests for the message header codec."""

import struct

import pytest

from ownet_mcp.errors import FramingError
from ownet_mcp.protocol.framing import (
    HEADER_SIZE,
    Header,
    build_message,
)


def test_header_size():
    """Headers are six int32 fields."""
    assert HEADER_SIZE == 24
    assert len(Header().to_bytes()) == HEADER_SIZE


def test_header_big_endian_layout():
    """Fields are written in order, most significant byte first."""
    raw = Header(version=0, payload=23, type=2, flags=0x102, size=16, offset=4).to_bytes()
    assert raw[0:4] == b"\x00\x00\x00\x00"
    assert raw[4:8] == b"\x00\x00\x00\x17"
    assert raw[8:12] == b"\x00\x00\x00\x02"
    assert raw[12:16] == b"\x00\x00\x01\x02"
    assert raw[16:20] == b"\x00\x00\x00\x10"
    assert raw[20:24] == b"\x00\x00\x00\x04"


def test_header_roundtrip_extremes():
    """Every field survives encode/decode, including negative codes."""
    original = Header(
        version=-(2**31),
        payload=2**31 - 1,
        type=-1,
        flags=0x102,
        size=0,
        offset=-42,
    )
    assert Header.from_bytes(original.to_bytes()) == original


def test_header_decodes_negative_type():
    raw = struct.pack(">6i", 0, 0, -1, 0, 0, 0)
    assert Header.from_bytes(raw).type == -1


def test_header_out_of_range_raises():
    with pytest.raises(ValueError):
        Header(size=2**31).to_bytes()


def test_header_short_input_raises():
    with pytest.raises(FramingError):
        Header.from_bytes(b"\x00" * 23)


def test_header_ignores_trailing_bytes():
    raw = Header(type=9).to_bytes() + b"extra"
    assert Header.from_bytes(raw).type == 9


def test_build_message_appends_payload():
    header = Header(payload=3)
    msg = build_message(header, b"/a\x00")
    assert msg[:HEADER_SIZE] == header.to_bytes()
    assert msg[HEADER_SIZE:] == b"/a\x00"


def test_header_repr():
    """Header repr should show flags in hex."""
    r = repr(Header(flags=0x102))
    assert "flags=0x102" in r
