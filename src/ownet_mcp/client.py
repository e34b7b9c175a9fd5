"""OWNet client: directory, read and write against an owserver daemon."""

from __future__ import annotations

import threading
from typing import Callable

from .errors import BufferTooSmallError, ProtocolError
from .models.device import Device
from .protocol.commands import (
    DEFAULT_FLAGS,
    Request,
    build_dir,
    build_read,
    build_write,
)
from .protocol.framing import Header
from .protocol.parser import (
    attr_path,
    decode_value,
    filter_devices,
    is_device_id,
    parse_dir_listing,
)
from .transport.tcp_connection import CONNECT_TIMEOUT, DEFAULT_ADDRESS, TCPConnection

DIR_BUFFER_SIZE = 4096
ATTR_READ_SIZE = 16
DEFAULT_READ_SIZE = 8192


def _nonzero(status: int) -> bool:
    return status != 0


def _negative(status: int) -> bool:
    return status < 0


class OWNetClient:
    """Client for one owserver.

    The connection is dialed for each operation and closed when it
    completes, whether it succeeded or not. A lock serializes whole
    operations, so one client may be shared between threads.

    Usage::

        with OWNetClient("127.0.0.1:4304") as ow:
            for dev in ow.list_devices():
                print(dev, ow.get_type(dev))
    """

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        flags: int = DEFAULT_FLAGS,
        connect_timeout: float = CONNECT_TIMEOUT,
        io_timeout: float | None = None,
    ) -> None:
        self._conn = TCPConnection(
            address or DEFAULT_ADDRESS,
            connect_timeout=connect_timeout,
            io_timeout=io_timeout,
        )
        self._flags = flags
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return self._conn.address

    @property
    def flags(self) -> int:
        return self._flags

    def close(self) -> None:
        """Release the connection, if one is held."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> OWNetClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _roundtrip(
        self,
        request: Request,
        capacity: int | None,
        failed: Callable[[int], bool],
    ) -> tuple[Header, bytes]:
        """Dial, send one request, read its response, and hang up.

        ``failed(type)`` decides whether the response status is an error.
        It is applied before any payload size complaint.
        """
        with self._lock:
            self._conn.open()
            try:
                header, data = self._conn.exchange(
                    request.header, request.payload, capacity
                )
            except BufferTooSmallError as e:
                if e.header is not None and failed(e.header.type):
                    raise ProtocolError(e.header.type) from e
                raise
            finally:
                self._conn.close()
        if failed(header.type):
            raise ProtocolError(header.type)
        return header, data

    # ─── PRIMITIVES ──────────────────────────────────────────────────

    def dir(self, path: str) -> list[str]:
        """List a directory.

        Returns:
            Entry paths in server order. An empty directory gives ``[""]``.

        Raises:
            ProtocolError: If the response type is nonzero.
            BufferTooSmallError: If the listing exceeds the scratch buffer.
        """
        request = build_dir(path, DIR_BUFFER_SIZE, flags=self._flags)
        _, data = self._roundtrip(request, DIR_BUFFER_SIZE, _nonzero)
        return parse_dir_listing(data)

    def read_into(self, path: str, offset: int, buffer: bytearray) -> int:
        """Read ``path`` starting at ``offset`` into ``buffer``.

        At most ``len(buffer)`` bytes are requested.

        Returns:
            Number of bytes placed at the start of ``buffer``.

        Raises:
            ProtocolError: If the response type is negative.
            BufferTooSmallError: If owserver sent more than the buffer holds.
        """
        capacity = len(buffer)
        request = build_read(path, capacity, offset, flags=self._flags)
        _, data = self._roundtrip(request, capacity, _negative)
        n = len(data)
        buffer[:n] = data
        return n

    def read(self, path: str, offset: int = 0, size: int = DEFAULT_READ_SIZE) -> bytes:
        """Read up to ``size`` bytes of ``path`` and return them."""
        if size < 0:
            raise ValueError(f"Read size must be >= 0, got {size}")
        buf = bytearray(size)
        n = self.read_into(path, offset, buf)
        return bytes(buf[:n])

    def write(self, path: str, offset: int, data: bytes | str) -> None:
        """Write ``data`` to ``path`` starting at ``offset``.

        Raises:
            ProtocolError: If the response type is negative.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        request = build_write(path, data, offset, flags=self._flags)
        self._roundtrip(request, None, _negative)

    # ─── DERIVED OPERATIONS ──────────────────────────────────────────

    def list_devices(self) -> list[str]:
        """Identifiers of the devices in the root directory, in listing order."""
        return filter_devices(self.dir("/"))

    def get_attr(self, device: str, attr: str, size: int = ATTR_READ_SIZE) -> str:
        """Read an attribute of a device as text.

        Values longer than ``size`` bytes are cut short by owserver.
        """
        return decode_value(self.read(attr_path(device, attr), 0, size))

    def set_attr(self, device: str, attr: str, value: str) -> None:
        """Write a text value to a device attribute."""
        self.write(attr_path(device, attr), 0, value)

    def get_type(self, device: str) -> str:
        """Device type as reported by owserver, e.g. ``DS2413``."""
        return self.get_attr(device, "type")

    def describe_device(self, device: str) -> Device:
        """Device record with its type.

        Raises:
            ValueError: If ``device`` is not a device identifier.
        """
        if not is_device_id(device):
            raise ValueError(f"Not a device identifier: {device!r}")
        return Device(id=device, type=self.get_type(device))
