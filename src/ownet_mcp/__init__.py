"""OWNet client for owserver, with an MCP server exposing it as tools."""

from .client import OWNetClient
from .errors import (
    BufferTooSmallError,
    FramingError,
    OWNetError,
    OwserverConnectionError,
    ProtocolError,
)
from .models.device import Device

__all__ = [
    "OWNetClient", "Device",
    "OWNetError", "OwserverConnectionError", "FramingError",
    "ProtocolError", "BufferTooSmallError",
]
