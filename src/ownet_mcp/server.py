"""MCP server entry point for owserver.

Exposes the 1-Wire filesystem served by owserver as tools, resources,
and prompts via the Model Context Protocol, using the official Python
MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import ATTR_READ_SIZE, DEFAULT_READ_SIZE, OWNetClient
from .errors import OWNetError, ProtocolError
from .transport.tcp_connection import DEFAULT_ADDRESS

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ownet",
    instructions="MCP server for 1-Wire networks behind an owserver daemon",
)

# Global client state
_client: OWNetClient | None = None


def _default_address() -> str:
    return os.environ.get("OWSERVER_ADDRESS") or DEFAULT_ADDRESS


def _get_client() -> OWNetClient:
    """Get the active client, raising if not connected."""
    if _client is None:
        raise RuntimeError(
            "Not connected to owserver. Use the 'connect' tool first."
        )
    return _client


def _error(e: Exception) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e)}
    if isinstance(e, ProtocolError):
        result["code"] = e.code
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(address: str | None = None) -> dict[str, Any]:
    """Point the server at an owserver and check that it answers.

    Lists the root directory once to confirm the daemon is reachable.

    Args:
        address: owserver "host:port" (default from OWSERVER_ADDRESS,
                 else 127.0.0.1:4304).
    """
    global _client
    try:
        client = OWNetClient(address or _default_address())
        devices = client.list_devices()
    except (OWNetError, ValueError) as e:
        result = _error(e)
        result["connected"] = False
        return result

    _client = client
    logger.info("Connected to owserver at %s", client.address)
    return {
        "connected": True,
        "address": client.address,
        "device_count": len(devices),
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Forget the current owserver."""
    global _client
    if _client is not None:
        _client.close()
        logger.info("Disconnected from owserver at %s", _client.address)
        _client = None
    return {"disconnected": True}


# ─── FILESYSTEM TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def list_directory(path: str = "/") -> dict[str, Any]:
    """List entries of an owserver directory.

    Args:
        path: Directory path, e.g. "/" or "/3A.BEE71B000000".
    """
    client = _get_client()
    try:
        entries = client.dir(path)
    except OWNetError as e:
        return _error(e)
    return {"path": path, "entries": [e for e in entries if e]}


@mcp.tool()
def read_path(
    path: str, offset: int = 0, size: int = DEFAULT_READ_SIZE
) -> dict[str, Any]:
    """Read bytes from an owserver file.

    Args:
        path: File path, e.g. "/3A.BEE71B000000/PIO.B".
        offset: Byte offset to start at.
        size: Maximum number of bytes to read.
    """
    if offset < 0 or size <= 0:
        return {"error": "offset must be >= 0 and size > 0"}

    client = _get_client()
    try:
        data = client.read(path, offset, size)
    except OWNetError as e:
        return _error(e)
    return {
        "path": path,
        "value": data.decode("utf-8", errors="replace"),
        "length": len(data),
    }


@mcp.tool()
def write_path(path: str, value: str, offset: int = 0) -> dict[str, Any]:
    """Write a value to an owserver file.

    Args:
        path: File path, e.g. "/3A.BEE71B000000/PIO.B".
        value: Text to write.
        offset: Byte offset to start at.
    """
    if offset < 0:
        return {"error": "offset must be >= 0"}

    client = _get_client()
    try:
        client.write(path, offset, value)
    except OWNetError as e:
        return _error(e)
    return {"written": True, "path": path, "length": len(value.encode("utf-8"))}


# ─── DEVICE TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def list_devices(with_types: bool = False) -> dict[str, Any]:
    """List the devices present on the bus.

    Args:
        with_types: Also read each device's type attribute.
    """
    client = _get_client()
    try:
        ids = client.list_devices()
        if with_types:
            devices = [client.describe_device(d).to_dict() for d in ids]
        else:
            devices = [{"id": d} for d in ids]
    except (OWNetError, ValueError) as e:
        return _error(e)
    return {"devices": devices, "count": len(devices)}


@mcp.tool()
def get_attribute(
    device: str, attr: str, size: int = ATTR_READ_SIZE
) -> dict[str, Any]:
    """Read one attribute of a device.

    Args:
        device: Device identifier, e.g. "3A.BEE71B000000".
        attr: Attribute name, e.g. "PIO.B" or "temperature".
        size: Read buffer size; longer values are truncated.
    """
    if size <= 0:
        return {"error": "size must be > 0"}

    client = _get_client()
    try:
        value = client.get_attr(device, attr, size)
    except OWNetError as e:
        return _error(e)
    return {"device": device, "attr": attr, "value": value}


@mcp.tool()
def set_attribute(device: str, attr: str, value: str) -> dict[str, Any]:
    """Write one attribute of a device.

    Args:
        device: Device identifier, e.g. "3A.BEE71B000000".
        attr: Attribute name, e.g. "PIO.A".
        value: New value, e.g. "1".
    """
    client = _get_client()
    try:
        client.set_attr(device, attr, value)
    except OWNetError as e:
        return _error(e)
    return {"device": device, "attr": attr, "value": value, "written": True}


@mcp.tool()
def get_device_type(device: str) -> dict[str, Any]:
    """Read a device's type, e.g. "DS18B20" or "DS2413".

    Args:
        device: Device identifier.
    """
    client = _get_client()
    try:
        dev = client.describe_device(device)
    except (OWNetError, ValueError) as e:
        return _error(e)
    return dev.to_dict()


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("ownet://server/info")
def resource_server_info() -> str:
    """owserver address and connection state."""
    if _client is None:
        return json.dumps({"connected": False, "address": _default_address()})
    return json.dumps({"connected": True, "address": _client.address})


@mcp.resource("ownet://devices")
def resource_devices() -> str:
    """Identifiers of the devices currently on the bus."""
    if _client is None:
        return json.dumps({"devices": []})
    try:
        devices = _client.list_devices()
    except OWNetError as e:
        return json.dumps(_error(e))
    return json.dumps({"devices": devices})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def survey_bus() -> str:
    """Walk the bus and summarize every device found."""
    return """List the devices using list_devices with with_types=true.
For each device:
- Use list_directory on its path to see the available attributes
- Read the attributes that describe its state (temperature, PIO.*, sensed.*)
- Note anything that looks wrong (85.0 temperatures, missing devices)

Summarize the bus as a table of id, type and current readings."""


@mcp.prompt()
def toggle_output(device: str, pin: str = "PIO.A") -> str:
    """Flip a switch output on a device.

    Args:
        device: Device identifier.
        pin: Output attribute to toggle.
    """
    return f"""Read {pin} of device {device} with get_attribute.
Write the opposite value ("0" or "1") back with set_attribute.
Read sensed.{pin.split('.')[-1]} afterwards, if present, to confirm the change."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
