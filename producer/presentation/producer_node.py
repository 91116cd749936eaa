from __future__ import annotations

"""Presentation-layer entry point for the producer.

Wires the transport, the topology declarator and the publishers together.
The topology is declared once in ``start()``; publishers only exist after it
succeeded, so no message can be sent to an undeclared exchange.
"""

import logging
from typing import Any, Optional

from common.errors import TopologyError, TransportError
from protocol.serializer import JsonSerializer, TextSerializer
from protocol.transport import Transport
from producer.config.topology_config import TopologyConfig

from ..data.rabbit_publisher import RabbitPublisher
from ..domain.event_sink import EventSink, LoggingEventSink
from ..domain.topology import Topology
from ..logic.topology_declarator import TopologyDeclarator


class ProducerNode:
    def __init__(
        self,
        config: dict,
        transport: Optional[Transport] = None,
        event_sink: Optional[EventSink] = None,
        serializer=None,
    ) -> None:
        self.config = config
        self.topology_config: TopologyConfig = config["topology"]
        self._transport = transport
        self._owns_transport = transport is None
        self._events = event_sink or LoggingEventSink()
        self._serializer = serializer or JsonSerializer()

        self.topology: Optional[Topology] = None
        self.json_publisher: Optional[RabbitPublisher] = None
        self.text_publisher: Optional[RabbitPublisher] = None

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------
    def start(self) -> Topology:
        try:
            if self._transport is None:
                self._transport = self._connect()
            self.topology = TopologyDeclarator(self._transport).declare(self.topology_config)
        except (TopologyError, TransportError) as e:
            logging.error(f"Producer startup failed: {e}")
            self.stop()
            if isinstance(e, TopologyError):
                raise
            raise TopologyError(f"Could not declare topology: {e}") from e

        self.json_publisher = RabbitPublisher(
            self._transport,
            self._serializer,
            self.topology.exchange,
            self.topology.json_binding.routing_key,
            self._events,
        )
        self.text_publisher = RabbitPublisher(
            self._transport,
            TextSerializer(),
            self.topology.exchange,
            self.topology.binding.routing_key,
            self._events,
        )
        logging.info("Producer ready to publish.")
        return self.topology

    def stop(self) -> None:
        self.json_publisher = None
        self.text_publisher = None
        if self._transport is not None and self._owns_transport:
            self._transport.close()
            self._transport = None
            logging.info("Producer transport closed.")

    def _connect(self) -> Transport:
        from protocol.rabbit_wrapper import RabbitMQTransport

        return RabbitMQTransport(
            self.config.get("rabbit_host", "rabbitmq"),
            port=self.config.get("rabbit_port", 5672),
            heartbeat=self.config.get("heartbeat", 600),
            blocked_connection_timeout=self.config.get("blocked_connection_timeout", 300),
            connect_retries=self.config.get("connect_retries", 5),
            connect_delay=self.config.get("connect_delay", 5),
            confirm_delivery=self.config.get("confirm_delivery", False),
        )

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    def send_json_message(self, payload: Any, *, routing_key: Optional[str] = None) -> None:
        """Publish *payload* as JSON under the JSON routing key (or *routing_key*)."""
        self._ready(self.json_publisher).publish(payload, routing_key=routing_key)

    def send_message(self, text: str) -> None:
        """Publish a plain text message under the default routing key."""
        self._ready(self.text_publisher).publish(text)

    def _ready(self, publisher: Optional[RabbitPublisher]) -> RabbitPublisher:
        if publisher is None:
            raise TopologyError("Topology not declared; call start() before publishing")
        return publisher
