"""TCP connection to an owserver daemon.

One ``TCPConnection`` wraps at most one socket. It is opened for a single
request/response exchange and closed again; the client decides when.
"""

from __future__ import annotations

import logging
import socket

from ..errors import BufferTooSmallError, FramingError, OwserverConnectionError
from ..protocol.framing import HEADER_SIZE, Header, build_message

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4304
DEFAULT_ADDRESS = f"{DEFAULT_HOST}:{DEFAULT_PORT}"
CONNECT_TIMEOUT = 30.0
RECV_CHUNK = 4096


def parse_address(address: str | None) -> tuple[str, int]:
    """Split ``host:port`` into its parts.

    Accepts ``[v6addr]:port`` and a bare host (default port). An empty
    address means the default loopback owserver.

    Raises:
        ValueError: If the port is not a valid TCP port number.
    """
    if not address:
        return DEFAULT_HOST, DEFAULT_PORT

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ValueError(f"Unterminated IPv6 address: {address!r}")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        host, port_text = address, ""

    if not port_text:
        return host or DEFAULT_HOST, DEFAULT_PORT

    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in address {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in address {address!r}")
    return host or DEFAULT_HOST, port


class TCPConnection:
    """Manages the socket to owserver and moves whole messages over it.

    Usage::

        conn = TCPConnection("127.0.0.1:4304")
        conn.open()
        conn.write_message(header, payload)
        header, data = conn.read_message(capacity=16)
        conn.close()
    """

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        connect_timeout: float = CONNECT_TIMEOUT,
        io_timeout: float | None = None,
    ) -> None:
        self._address = address or DEFAULT_ADDRESS
        self._host, self._port = parse_address(self._address)
        self._connect_timeout = connect_timeout
        self._io_timeout = io_timeout
        self._sock: socket.socket | None = None

    @property
    def address(self) -> str:
        return self._address

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def open(self) -> None:
        """Dial owserver.

        Raises:
            OwserverConnectionError: If the connect timeout elapses or the
                address is refused or unreachable.
        """
        if self._sock is not None:
            return
        try:
            sock = socket.create_connection(
                (self._host, self._port), timeout=self._connect_timeout
            )
        except OSError as e:
            raise OwserverConnectionError(
                f"Could not connect to owserver at {self._address}: {e}"
            ) from e
        # Connect timeout only; I/O blocks unless io_timeout is set
        sock.settimeout(self._io_timeout)
        self._sock = sock
        logger.debug("Connected to %s", self._address)

    def close(self) -> None:
        """Close the socket, if open. The next open() dials again."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket to %s: %s", self._address, e)
        finally:
            self._sock = None
            logger.debug("Disconnected from %s", self._address)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionError("Not connected to owserver")
        return self._sock

    def write_message(self, header: Header, payload: bytes = b"") -> None:
        """Send a header followed by its payload.

        ``sendall`` retries partial writes until every byte is flushed or
        the socket reports an error.

        Raises:
            OSError: If the socket fails while sending.
        """
        sock = self._require_socket()
        logger.debug("-> %r (+%d payload bytes)", header, len(payload))
        sock.sendall(build_message(header, payload))

    def _recv_exact(self, n: int) -> bytes:
        sock = self._require_socket()
        buf = bytearray()
        while len(buf) < n:
            chunk = sock.recv(min(n - len(buf), RECV_CHUNK))
            if not chunk:
                raise FramingError(
                    f"Connection closed after {len(buf)} of {n} bytes"
                )
            buf.extend(chunk)
        return bytes(buf)

    def read_header(self) -> Header:
        """Read exactly one 24-byte header.

        Raises:
            FramingError: On a short read or a socket failure.
        """
        try:
            data = self._recv_exact(HEADER_SIZE)
        except OSError as e:
            raise FramingError(f"Failed to read response header: {e}") from e
        header = Header.from_bytes(data)
        logger.debug("<- %r", header)
        return header

    def _drain(self, n: int) -> None:
        """Consume ``n`` payload bytes without keeping them."""
        sock = self._require_socket()
        remaining = n
        while remaining > 0:
            chunk = sock.recv(min(remaining, RECV_CHUNK))
            if not chunk:
                raise FramingError(
                    f"Connection closed after {n - remaining} of {n} bytes"
                )
            remaining -= len(chunk)

    def read_message(self, capacity: int | None) -> tuple[Header, bytes]:
        """Read one response: the header, then the payload it declares.

        Args:
            capacity: Largest payload the caller accepts. ``None`` means no
                payload is expected; any declared payload is discarded.

        Returns:
            The response header and the payload bytes (possibly empty).

        Raises:
            FramingError: On a short header, or EOF inside the payload.
            BufferTooSmallError: If the declared payload exceeds
                ``capacity``. The payload is drained in chunks first and
                the header travels with the error.
            OSError: If the socket fails while reading the payload.
        """
        header = self.read_header()
        if header.payload <= 0:
            return header, b""

        if capacity is None:
            self._drain(header.payload)
            logger.debug("Discarded %d unexpected payload bytes", header.payload)
            return header, b""
        if header.payload > capacity:
            self._drain(header.payload)
            raise BufferTooSmallError(header.payload, capacity, header)
        return header, self._recv_exact(header.payload)

    def exchange(
        self, header: Header, payload: bytes, capacity: int | None
    ) -> tuple[Header, bytes]:
        """Send one request and read its response."""
        self.write_message(header, payload)
        return self.read_message(capacity)
