"""Shared fixtures: an in-process fake owserver."""

from __future__ import annotations

import socket
import threading
from collections import deque

import pytest

from ownet_mcp.protocol.framing import HEADER_SIZE, Header


def _recv_exact(sock: socket.socket, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


class FakeOwserver:
    """Accepts one request per connection and answers from a script.

    Replies are taken from ``replies`` in order; when it is empty,
    ``handler(header, payload)`` is called instead. Every request is
    recorded in ``requests`` as ``(Header, payload)``.
    """

    def __init__(self) -> None:
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(16)
        self._listener.settimeout(0.1)
        self.address = "127.0.0.1:%d" % self._listener.getsockname()[1]
        self.requests: list[tuple[Header, bytes]] = []
        self.replies: deque[tuple[Header, bytes]] = deque()
        self.handler = lambda header, payload: (Header(), b"")
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def reply(self, payload: bytes = b"", **fields) -> None:
        """Queue a reply whose header declares ``len(payload)``."""
        fields.setdefault("payload", len(payload))
        self.replies.append((Header(**fields), payload))

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5)
                self._handle(conn)

    def _handle(self, conn: socket.socket) -> None:
        raw = _recv_exact(conn, HEADER_SIZE)
        if len(raw) < HEADER_SIZE:
            return
        header = Header.from_bytes(raw)
        payload = _recv_exact(conn, max(header.payload, 0))
        self.requests.append((header, payload))
        if self.replies:
            reply_header, reply_payload = self.replies.popleft()
        else:
            reply_header, reply_payload = self.handler(header, payload)
        conn.sendall(reply_header.to_bytes() + reply_payload)

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._listener.close()


@pytest.fixture
def owserver():
    server = FakeOwserver()
    yield server
    server.stop()
