"""Transport layer: TCP connection to owserver."""

from .tcp_connection import TCPConnection, parse_address, DEFAULT_ADDRESS
