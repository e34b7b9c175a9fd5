"""Message type constants and request builders.

Each builder returns the header and payload for one request. The payload
is always the NUL-terminated path, followed by the data for writes, and
the header's ``payload`` field always equals its exact length.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .framing import Header, PROTOCOL_VERSION, build_message


class MessageType(IntEnum):
    """owserver message types, in protocol order."""

    ERROR = 0
    NOP = 1
    READ = 2
    WRITE = 3
    DIR = 4
    SIZE = 5
    PRESENCE = 6
    DIRALL = 7
    GET = 8
    DIRALLSLASH = 9
    GET_SLASH = 10


# Format/capability flags sent with every request
DEFAULT_FLAGS = 0x102


@dataclass
class Request:
    """A header plus the payload that follows it on the wire."""

    header: Header
    payload: bytes

    def to_bytes(self) -> bytes:
        return build_message(self.header, self.payload)


def encode_path(path: str) -> bytes:
    """Encode a filesystem path with its NUL terminator."""
    return path.encode("utf-8") + b"\x00"


def build_request(
    msg_type: MessageType,
    path: str,
    data: bytes = b"",
    size: int = 0,
    offset: int = 0,
    flags: int = DEFAULT_FLAGS,
) -> Request:
    """Build a request for ``path``, appending ``data`` after the terminator."""
    payload = encode_path(path) + data
    header = Header(
        version=PROTOCOL_VERSION,
        payload=len(payload),
        type=int(msg_type),
        flags=flags,
        size=size,
        offset=offset,
    )
    return Request(header=header, payload=payload)


def build_dir(path: str, size: int, flags: int = DEFAULT_FLAGS) -> Request:
    """Build a request listing a whole directory in one comma separated payload.

    Args:
        path: Directory to list.
        size: Receive buffer size advertised to the server.
    """
    return build_request(MessageType.DIRALL, path, size=size, flags=flags)


def build_read(
    path: str, size: int, offset: int = 0, flags: int = DEFAULT_FLAGS
) -> Request:
    """Build a read request for up to ``size`` bytes at ``offset``."""
    if offset < 0:
        raise ValueError(f"Read offset must be >= 0, got {offset}")
    return build_request(
        MessageType.READ, path, size=size, offset=offset, flags=flags
    )


def build_write(
    path: str, data: bytes, offset: int = 0, flags: int = DEFAULT_FLAGS
) -> Request:
    """Build a write request carrying ``data`` after the path terminator."""
    if offset < 0:
        raise ValueError(f"Write offset must be >= 0, got {offset}")
    return build_request(
        MessageType.WRITE,
        path,
        data=data,
        size=len(data),
        offset=offset,
        flags=flags,
    )
