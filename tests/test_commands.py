"""Tests for request builders."""

import pytest

from ownet_mcp.protocol.commands import (
    DEFAULT_FLAGS,
    MessageType,
    build_dir,
    build_read,
    build_request,
    build_write,
    encode_path,
)
from ownet_mcp.protocol.framing import HEADER_SIZE, Header


def test_message_type_values():
    """Verify the verbs used by the client match owserver's numbering."""
    assert MessageType.ERROR == 0
    assert MessageType.READ == 2
    assert MessageType.WRITE == 3
    assert MessageType.DIRALL == 7
    assert MessageType.DIRALLSLASH == 9
    assert MessageType.GET_SLASH == 10


def test_encode_path_terminates():
    assert encode_path("/") == b"/\x00"


def test_build_dir():
    req = build_dir("/", 4096)
    assert req.header.type == MessageType.DIRALL == 7
    assert req.header.flags == DEFAULT_FLAGS
    assert req.header.size == 4096
    assert req.header.payload == 2
    assert req.payload == b"/\x00"


def test_build_read():
    path = "/3A.BEE71B000000/PIO.B"
    req = build_read(path, 16, offset=3)
    assert req.header.type == MessageType.READ
    assert req.header.size == 16
    assert req.header.offset == 3
    assert req.header.payload == len(path) + 1
    assert req.payload == path.encode() + b"\x00"


def test_build_read_negative_offset():
    with pytest.raises(ValueError):
        build_read("/x", 16, offset=-1)


@pytest.mark.parametrize("data", [b"", b"1", b"hello world" * 10])
def test_build_write_payload(data):
    """Payload is path + NUL + data; its length is declared exactly."""
    path = "/3A.BEE71B000000/PIO.B"
    req = build_write(path, data)
    assert req.payload == path.encode() + b"\x00" + data
    assert req.header.payload == len(path) + 1 + len(data)
    assert req.header.size == len(data)
    assert req.header.type == MessageType.WRITE


def test_request_to_bytes():
    req = build_request(MessageType.NOP, "/", flags=0)
    raw = req.to_bytes()
    assert Header.from_bytes(raw) == req.header
    assert raw[HEADER_SIZE:] == b"/\x00"
