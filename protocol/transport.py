from __future__ import annotations

"""Abstraction of the broker connection.

The topology declarator and the publishers only talk to this interface so that the
concrete AMQP client can be replaced (or faked in tests) without touching the
publish path.
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """Operations the producer needs from a broker client.

    Declarations must be idempotent on the broker side and raise
    ``TopologyError`` on conflict.  ``send`` raises ``TransportError`` when the
    message could not be handed to the broker.
    """

    @abstractmethod
    def declare_exchange(self, name: str, exchange_type: str, durable: bool) -> None:
        pass

    @abstractmethod
    def declare_queue(self, name: str, durable: bool) -> None:
        pass

    @abstractmethod
    def declare_binding(self, queue: str, exchange: str, routing_key: str) -> None:
        pass

    @abstractmethod
    def send(self, exchange: str, routing_key: str, body: bytes, content_type: str) -> bool:
        """Hand *body* to the broker.  Exactly one attempt, no retry.

        Returns False when the broker reported the message as unroutable,
        which is only known when publisher confirms are enabled.
        """

    @abstractmethod
    def close(self) -> None:
        pass
