from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OutgoingMessage:
    """Envelope built for a single publish call and dropped once sent."""

    exchange: str
    routing_key: str
    body: bytes
    content_type: str

    def __len__(self) -> int:
        return len(self.body)
