"""1-Wire device model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Device:
    """A device present on the bus, as seen through owserver."""

    id: str
    type: str = ""

    @property
    def family(self) -> int:
        """Family code: the first two hex digits of the identifier."""
        return int(self.id[:2], 16)

    @property
    def path(self) -> str:
        return f"/{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "family": f"{self.family:02X}",
            "type": self.type,
        }
