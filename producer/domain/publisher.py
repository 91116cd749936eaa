from __future__ import annotations

"""Domain-level abstraction for publishing objects downstream.

Callers depend on this interface rather than on the RabbitMQ adapter.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class Publisher(ABC):
    """Serializes one payload per call and sends it under a routing key."""

    @abstractmethod
    def publish(self, payload: Any, *, routing_key: Optional[str] = None) -> None:
        """Send *payload* to the exchange.

        Each publisher is configured with a fixed routing key; ``routing_key``
        overrides it for this call only.  Raises ``SerializationError`` or
        ``TransportError``; nothing is retried.
        """
