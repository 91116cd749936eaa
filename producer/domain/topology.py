from __future__ import annotations

"""Value objects describing the broker topology the producer relies on.

They are built once by the ``TopologyDeclarator`` after the broker accepted
each declaration and are then held, unchanged, for the life of the process.
"""

from dataclasses import dataclass

TOPIC = "topic"


@dataclass(frozen=True)
class Exchange:
    name: str
    exchange_type: str = TOPIC
    durable: bool = True


@dataclass(frozen=True)
class Queue:
    name: str
    durable: bool = True


@dataclass(frozen=True)
class Binding:
    """Routes messages whose key matches ``routing_key`` from exchange to queue."""

    queue: Queue
    exchange: Exchange
    routing_key: str


@dataclass(frozen=True)
class Topology:
    exchange: Exchange
    queue: Queue
    json_queue: Queue
    binding: Binding
    json_binding: Binding

    @property
    def bindings(self) -> tuple[Binding, Binding]:
        return (self.binding, self.json_binding)
