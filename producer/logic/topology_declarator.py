from __future__ import annotations

"""Declares the exchange, queues and bindings the producer publishes through.

Declarations run once at startup, strictly in the order exchange, queues,
bindings, and stop at the first failure.  Every declaration is idempotent:
the broker accepts a re-declaration with identical settings, and bindings
already made by this declarator are not sent again.
"""

import logging
from typing import Dict, Tuple

from common.errors import TopologyError
from producer.config.topology_config import TopologyConfig
from producer.domain.topology import TOPIC, Binding, Exchange, Queue, Topology
from protocol.transport import Transport


class TopologyDeclarator:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._exchanges: Dict[str, Exchange] = {}
        self._queues: Dict[str, Queue] = {}
        self._bindings: Dict[Tuple[str, str, str], Binding] = {}

    def declare_exchange(self, name: str) -> Exchange:
        exchange = Exchange(name, exchange_type=TOPIC, durable=True)
        self._transport.declare_exchange(name, exchange.exchange_type, exchange.durable)
        self._exchanges[name] = exchange
        return exchange

    def declare_queue(self, name: str) -> Queue:
        queue = Queue(name, durable=True)
        self._transport.declare_queue(name, queue.durable)
        self._queues[name] = queue
        return queue

    def declare_binding(self, queue: Queue, exchange: Exchange, routing_key: str) -> Binding:
        if self._queues.get(queue.name) != queue:
            raise TopologyError(f"Queue '{queue.name}' must be declared before binding it")
        if self._exchanges.get(exchange.name) != exchange:
            raise TopologyError(f"Exchange '{exchange.name}' must be declared before binding to it")

        key = (queue.name, exchange.name, routing_key)
        binding = self._bindings.get(key)
        if binding is not None:
            logging.debug(f"Binding {key} already declared, skipping")
            return binding

        self._transport.declare_binding(queue.name, exchange.name, routing_key)
        binding = Binding(queue, exchange, routing_key)
        self._bindings[key] = binding
        return binding

    def declare(self, config: TopologyConfig) -> Topology:
        """Declares the whole topology described by *config*.

        Raises ``TopologyError`` on the first failure; nothing declared after
        the failing object is attempted.
        """
        try:
            exchange = self.declare_exchange(config.exchange_name)
            queue = self.declare_queue(config.queue_name)
            json_queue = self.declare_queue(config.json_queue_name)
            binding = self.declare_binding(queue, exchange, config.routing_key)
            json_binding = self.declare_binding(json_queue, exchange, config.json_routing_key)
        except TopologyError as e:
            logging.error(f"Topology declaration failed: {e}")
            raise

        logging.info(
            f"Topology declared: exchange '{exchange.name}' ({exchange.exchange_type}), "
            f"'{queue.name}' <- '{binding.routing_key}', '{json_queue.name}' <- '{json_binding.routing_key}'"
        )
        return Topology(exchange, queue, json_queue, binding, json_binding)

    @property
    def bindings(self) -> Tuple[Binding, ...]:
        return tuple(self._bindings.values())
