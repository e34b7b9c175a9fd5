"""Exception types raised by the OWNet client."""

from __future__ import annotations


class OWNetError(Exception):
    """Base class for all client errors."""


class OwserverConnectionError(OWNetError, ConnectionError):
    """The owserver address could not be dialed (timeout, refused, unreachable)."""


class FramingError(OWNetError):
    """A message header could not be read, or the stream ended mid-message."""


class ProtocolError(OWNetError):
    """owserver answered with an error status in the header type field."""

    def __init__(self, code: int) -> None:
        super().__init__(f"owserver returned error {code}")
        self.code = code


class BufferTooSmallError(OWNetError):
    """A response carried more payload than the destination can hold.

    The payload has already been consumed from the socket when this is
    raised, so the stream is left on a message boundary. ``header`` is the
    response header, so callers can still read its status.
    """

    def __init__(self, required: int, capacity: int, header=None) -> None:
        super().__init__(
            f"response payload of {required} bytes does not fit "
            f"in a {capacity}-byte buffer"
        )
        self.required = required
        self.capacity = capacity
        self.header = header
