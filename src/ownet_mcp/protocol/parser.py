"""Response payload parsing: directory listings, device ids, attribute values."""

from __future__ import annotations

import re

# Device identifiers as they appear in the owserver root directory
DEVICE_PATTERN = re.compile(r"[0-9A-F]{2}\.[0-9A-F]{12}")


def parse_dir_listing(payload: bytes) -> list[str]:
    """Split a directory listing payload into its entries.

    Entries are comma separated and keep the server's order. An empty
    payload gives ``[""]``. One trailing NUL terminator is dropped.
    """
    text = payload.removesuffix(b"\x00").decode("utf-8", errors="replace")
    return text.split(",")


def match_device(entry: str) -> str | None:
    """Return the device identifier contained in a listing entry, if any."""
    m = DEVICE_PATTERN.search(entry)
    return m.group(0) if m else None


def is_device_id(text: str) -> bool:
    """True if ``text`` is exactly one device identifier."""
    return DEVICE_PATTERN.fullmatch(text) is not None


def filter_devices(entries: list[str]) -> list[str]:
    """Keep only device identifiers, in the order they were listed."""
    devices = []
    for entry in entries:
        dev = match_device(entry)
        if dev is not None:
            devices.append(dev)
    return devices


def decode_value(data: bytes) -> str:
    """Decode an attribute value read from owserver."""
    return data.decode("utf-8", errors="replace")


def attr_path(device: str, attr: str) -> str:
    """Build the filesystem path of a device attribute."""
    return f"/{device}/{attr}"
