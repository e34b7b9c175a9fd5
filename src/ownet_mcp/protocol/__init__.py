"""Protocol layer: header codec, request builders, and response parsing."""

from .framing import Header, HEADER_SIZE, build_message
from .commands import MessageType, Request, build_request
