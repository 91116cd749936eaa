from __future__ import annotations

"""RabbitMQ-backed implementation of the *Publisher* abstraction."""

import warnings
from typing import Any, Optional

from common.errors import SerializationError, TransportError, UnroutableWarning
from producer.domain.event_sink import PUBLISH_FAILED, PUBLISHED, UNROUTABLE, EventSink, LoggingEventSink
from producer.domain.message import OutgoingMessage
from producer.domain.publisher import Publisher
from producer.domain.topology import Exchange
from protocol.transport import Transport


class RabbitPublisher(Publisher):
    """Serializes a payload and forwards it to the transport in one send.

    Holds no per-message state, so one instance can be shared by callers on
    the thread that owns the transport.
    """

    def __init__(
        self,
        transport: Transport,
        serializer,
        exchange: Exchange,
        routing_key: str,
        event_sink: Optional[EventSink] = None,
    ) -> None:
        self._transport = transport
        self._serializer = serializer
        self._exchange = exchange
        self._routing_key = routing_key
        self._events = event_sink or LoggingEventSink()

    @property
    def routing_key(self) -> str:
        return self._routing_key

    def publish(self, payload: Any, *, routing_key: Optional[str] = None) -> None:  # noqa: D401
        key = routing_key if routing_key is not None else self._routing_key
        message = self._build_message(payload, key)

        try:
            routed = self._transport.send(
                message.exchange, message.routing_key, message.body, message.content_type
            )
        except TransportError as e:
            self._events.emit(
                PUBLISH_FAILED, exchange=message.exchange, routing_key=key, reason="transport", error=str(e)
            )
            raise

        if routed is False:
            self._events.emit(UNROUTABLE, exchange=message.exchange, routing_key=key, size=len(message))
            warnings.warn(
                f"Message to exchange '{message.exchange}' with key '{key}' matched no binding",
                UnroutableWarning,
                stacklevel=2,
            )
            return

        self._events.emit(
            PUBLISHED,
            exchange=message.exchange,
            routing_key=key,
            content_type=message.content_type,
            size=len(message),
        )

    def _build_message(self, payload: Any, routing_key: str) -> OutgoingMessage:
        try:
            body, content_type = self._serializer.serialize(payload)
        except SerializationError as e:
            self._events.emit(
                PUBLISH_FAILED, exchange=self._exchange.name, routing_key=routing_key, reason="serialization", error=str(e)
            )
            raise
        return OutgoingMessage(self._exchange.name, routing_key, body, content_type)
