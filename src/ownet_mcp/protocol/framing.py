"""Message header codec for the OWNet protocol.

Every request and response starts with the same fixed header::

    +---------+---------+---------+---------+---------+---------+
    | version | payload |  type   |  flags  |  size   | offset  |
    | int32   | int32   | int32   | int32   | int32   | int32   |
    +---------+---------+---------+---------+---------+---------+

- All fields are signed, big-endian.
- payload: exact byte count of the data segment after the header
- type: message verb on requests, status on responses (negative = error)
- size: requested buffer size (read/dir) or data length (write)
- offset: byte offset into the file for read/write
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ..errors import FramingError

HEADER_FORMAT = ">6i"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 24
PROTOCOL_VERSION = 0


@dataclass
class Header:
    """One OWNet message header."""

    version: int = PROTOCOL_VERSION
    payload: int = 0
    type: int = 0
    flags: int = 0
    size: int = 0
    offset: int = 0

    def __repr__(self) -> str:
        return (
            f"Header(version={self.version}, payload={self.payload}, "
            f"type={self.type}, flags=0x{self.flags & 0xFFFFFFFF:X}, "
            f"size={self.size}, offset={self.offset})"
        )

    def to_bytes(self) -> bytes:
        """Serialize the header as six big-endian int32 values.

        Raises:
            ValueError: If a field does not fit in a signed 32-bit integer.
        """
        try:
            return struct.pack(
                HEADER_FORMAT,
                self.version,
                self.payload,
                self.type,
                self.flags,
                self.size,
                self.offset,
            )
        except struct.error as e:
            raise ValueError(f"Header field out of int32 range: {self!r}") from e

    @classmethod
    def from_bytes(cls, data: bytes) -> Header:
        """Decode the first 24 bytes of ``data``.

        Raises:
            FramingError: If fewer than 24 bytes are given.
        """
        if len(data) < HEADER_SIZE:
            raise FramingError(
                f"Header needs {HEADER_SIZE} bytes, got {len(data)}"
            )
        return cls(*struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE]))


def build_message(header: Header, payload: bytes = b"") -> bytes:
    """Concatenate an encoded header and its payload."""
    return header.to_bytes() + payload
