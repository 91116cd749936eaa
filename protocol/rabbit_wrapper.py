import logging
import threading
import time

import pika
import pika.exceptions

from common.errors import TopologyError, TransportError
from protocol.transport import Transport

rabbit_logger = logging.getLogger("RabbitMQ")

PERSISTENT_DELIVERY_MODE = 2


class RabbitMQBase:
    """Base class handling RabbitMQ connection and channel setup with retries.

    A pika ``BlockingConnection`` is not thread safe: the connection and its
    channel belong to the thread that built this object.
    """

    def __init__(self, host, port=5672, heartbeat=600, blocked_connection_timeout=300,
                 connect_retries=5, connect_delay=5, confirm_delivery=False):
        self.host = host
        self.port = port
        self.confirm_delivery = confirm_delivery
        self._parameters = pika.ConnectionParameters(
            host=host,
            port=port,
            heartbeat=heartbeat,
            blocked_connection_timeout=blocked_connection_timeout,
        )
        self._owner_thread = threading.get_ident()
        self._connection = None
        self._channel = None
        self._connect_with_retry(connect_retries, connect_delay)

    def _connect_with_retry(self, max_retries=5, delay=5):
        """Establishes connection with RabbitMQ using retries."""
        retries = 0
        while True:
            try:
                if self._channel and self._channel.is_open:
                    self._channel.close()
                if self._connection and self._connection.is_open:
                    self._connection.close()

                self._connection = pika.BlockingConnection(self._parameters)
                self._channel = self._open_channel()
                rabbit_logger.info(f"Successfully connected to RabbitMQ at {self.host}:{self.port}")
                return
            except pika.exceptions.AMQPConnectionError as e:
                retries += 1
                if retries >= max_retries:
                    rabbit_logger.error(f"Could not connect to RabbitMQ at {self.host}:{self.port} after {retries} attempts")
                    raise TransportError(f"RabbitMQ unavailable at {self.host}:{self.port}: {e!r}") from e
                rabbit_logger.warning(f"Connection attempt {retries}/{max_retries} failed: {e!r}. Retrying in {delay}s...")
                time.sleep(delay)

    def _open_channel(self):
        channel = self._connection.channel()
        if self.confirm_delivery:
            channel.confirm_delivery()
        return channel

    def _check_thread(self):
        if threading.get_ident() != self._owner_thread:
            raise TransportError(
                f"RabbitMQ channel to {self.host} used from thread {threading.get_ident()}, "
                f"owned by {self._owner_thread}; create one transport per thread"
            )

    @property
    def channel(self):
        """Ensures channel is active, reconnects once if necessary."""
        self._check_thread()
        if not self._connection or self._connection.is_closed:
            rabbit_logger.warning("Connection is closed. Attempting to reconnect...")
            self._connect_with_retry(max_retries=1, delay=0)
        elif not self._channel or self._channel.is_closed:
            # A broker-side error (e.g. PRECONDITION_FAILED) closes only the channel
            rabbit_logger.warning("Channel is closed, but connection seems open. Recreating channel...")
            try:
                self._channel = self._open_channel()
            except pika.exceptions.AMQPError as e:
                raise TransportError(f"Failed to recreate channel: {e!r}") from e
            rabbit_logger.info("Channel successfully recreated.")
        return self._channel

    def stop(self):
        """Closes the channel and connection gracefully."""
        try:
            if self._channel and self._channel.is_open:
                self._channel.close()
                rabbit_logger.info("RabbitMQ channel closed.")
            if self._connection and self._connection.is_open:
                self._connection.close()
                rabbit_logger.info("RabbitMQ connection closed.")
        except pika.exceptions.AMQPError as e:
            rabbit_logger.error(f"Error closing RabbitMQ resources: {e!r}", exc_info=True)
        finally:
            self._channel = None
            self._connection = None


class RabbitMQTransport(RabbitMQBase, Transport):
    """Transport implementation backed by a blocking pika channel."""

    def declare_exchange(self, name, exchange_type, durable):
        self._declare(
            f"exchange '{name}' ({exchange_type}, durable={durable})",
            lambda ch: ch.exchange_declare(exchange=name, exchange_type=exchange_type, durable=durable),
        )

    def declare_queue(self, name, durable):
        self._declare(
            f"queue '{name}' (durable={durable})",
            lambda ch: ch.queue_declare(queue=name, durable=durable),
        )

    def declare_binding(self, queue, exchange, routing_key):
        self._declare(
            f"binding '{queue}' -> '{exchange}' with key '{routing_key}'",
            lambda ch: ch.queue_bind(queue=queue, exchange=exchange, routing_key=routing_key),
        )

    def _declare(self, what, declare):
        try:
            declare(self.channel)
        except pika.exceptions.ChannelClosedByBroker as e:
            rabbit_logger.error(f"Broker refused {what}: {e.reply_code} {e.reply_text}")
            raise TopologyError(f"Broker refused {what}: {e.reply_code} {e.reply_text}") from e
        except (pika.exceptions.AMQPError, TransportError) as e:
            rabbit_logger.error(f"Failed to declare {what}: {e!r}")
            raise TopologyError(f"Failed to declare {what}: {e!r}") from e
        rabbit_logger.info(f"Declared {what}")

    def send(self, exchange, routing_key, body, content_type):
        """Publishes *body* once.  Returns False if the broker returned it as unroutable."""
        properties = pika.BasicProperties(
            content_type=content_type,
            content_encoding="utf-8",
            delivery_mode=PERSISTENT_DELIVERY_MODE,
        )
        try:
            self.channel.basic_publish(
                exchange=exchange,
                routing_key=routing_key,
                body=body,
                properties=properties,
                mandatory=self.confirm_delivery,
            )
        except pika.exceptions.UnroutableError:
            rabbit_logger.warning(f"Message to exchange '{exchange}' with key '{routing_key}' was returned as unroutable")
            return False
        except pika.exceptions.NackError as e:
            raise TransportError(f"Broker nacked message to exchange '{exchange}': {e!r}") from e
        except pika.exceptions.AMQPError as e:
            raise TransportError(f"Failed to publish to exchange '{exchange}' with key '{routing_key}': {e!r}") from e
        rabbit_logger.debug(f"Published message to exchange '{exchange}' with key '{routing_key}'")
        return True

    def close(self):
        self.stop()
