import threading
from unittest.mock import MagicMock, patch

import pika.exceptions
import pytest

from common.errors import TopologyError, TransportError
from protocol.rabbit_wrapper import PERSISTENT_DELIVERY_MODE, RabbitMQTransport


@pytest.fixture
def pika_connection():
    with patch("protocol.rabbit_wrapper.pika.BlockingConnection") as mock_blocking:
        connection = MagicMock()
        connection.is_closed = False
        channel = MagicMock()
        channel.is_closed = False
        connection.channel.return_value = channel
        mock_blocking.return_value = connection
        yield mock_blocking, connection, channel


class TestRabbitMQTransport:
    def test_connects_with_parameters(self, pika_connection):
        mock_blocking, connection, channel = pika_connection

        RabbitMQTransport("broker", port=5673, heartbeat=30)

        params = mock_blocking.call_args.args[0]
        assert params.host == "broker"
        assert params.port == 5673
        assert params.heartbeat == 30
        channel.confirm_delivery.assert_not_called()

    def test_enables_confirms(self, pika_connection):
        _, _, channel = pika_connection

        RabbitMQTransport("broker", confirm_delivery=True)

        channel.confirm_delivery.assert_called_once()

    @patch("protocol.rabbit_wrapper.time.sleep")
    def test_connection_retries_then_fails(self, mock_sleep, pika_connection):
        mock_blocking, _, _ = pika_connection
        mock_blocking.side_effect = pika.exceptions.AMQPConnectionError("refused")

        with pytest.raises(TransportError, match="unavailable"):
            RabbitMQTransport("broker", connect_retries=3, connect_delay=1)

        assert mock_blocking.call_count == 3
        assert mock_sleep.call_count == 2

    def test_declarations(self, pika_connection):
        _, _, channel = pika_connection
        transport = RabbitMQTransport("broker")

        transport.declare_exchange("orders.topic", "topic", True)
        transport.declare_queue("orders.json.queue", True)
        transport.declare_binding("orders.json.queue", "orders.topic", "orders.json")

        channel.exchange_declare.assert_called_once_with(exchange="orders.topic", exchange_type="topic", durable=True)
        channel.queue_declare.assert_called_once_with(queue="orders.json.queue", durable=True)
        channel.queue_bind.assert_called_once_with(
            queue="orders.json.queue", exchange="orders.topic", routing_key="orders.json"
        )

    def test_precondition_failed_is_topology_error(self, pika_connection):
        _, _, channel = pika_connection
        channel.exchange_declare.side_effect = pika.exceptions.ChannelClosedByBroker(
            406, "PRECONDITION_FAILED - inequivalent arg 'type'"
        )
        transport = RabbitMQTransport("broker")

        with pytest.raises(TopologyError, match="406"):
            transport.declare_exchange("orders.topic", "topic", True)

    def test_channel_reopened_after_broker_close(self, pika_connection):
        _, connection, channel = pika_connection
        transport = RabbitMQTransport("broker")
        channel.is_closed = True
        fresh = MagicMock()
        fresh.is_closed = False
        connection.channel.return_value = fresh

        transport.declare_queue("orders.queue", True)

        fresh.queue_declare.assert_called_once_with(queue="orders.queue", durable=True)

    @patch("protocol.rabbit_wrapper.pika.BasicProperties")
    def test_send_publishes_persistent_message(self, mock_props, pika_connection):
        _, _, channel = pika_connection
        transport = RabbitMQTransport("broker")

        routed = transport.send("orders.topic", "orders.json", b'{"id":42}', "application/json")

        assert routed is True
        mock_props.assert_called_once_with(
            content_type="application/json",
            content_encoding="utf-8",
            delivery_mode=PERSISTENT_DELIVERY_MODE,
        )
        channel.basic_publish.assert_called_once_with(
            exchange="orders.topic",
            routing_key="orders.json",
            body=b'{"id":42}',
            properties=mock_props.return_value,
            mandatory=False,
        )

    def test_send_failure_is_transport_error(self, pika_connection):
        _, _, channel = pika_connection
        channel.basic_publish.side_effect = pika.exceptions.StreamLostError("lost")
        transport = RabbitMQTransport("broker")

        with pytest.raises(TransportError):
            transport.send("orders.topic", "orders.json", b"{}", "application/json")

        assert channel.basic_publish.call_count == 1

    def test_nack_is_transport_error(self, pika_connection):
        _, _, channel = pika_connection
        channel.basic_publish.side_effect = pika.exceptions.NackError([])
        transport = RabbitMQTransport("broker", confirm_delivery=True)

        with pytest.raises(TransportError, match="nacked"):
            transport.send("orders.topic", "orders.json", b"{}", "application/json")

    def test_unroutable_returns_false(self, pika_connection):
        _, _, channel = pika_connection
        channel.basic_publish.side_effect = pika.exceptions.UnroutableError([])
        transport = RabbitMQTransport("broker", confirm_delivery=True)

        assert transport.send("orders.topic", "nowhere", b"{}", "application/json") is False
        assert channel.basic_publish.call_args.kwargs["mandatory"] is True

    def test_foreign_thread_is_rejected(self, pika_connection):
        _, _, channel = pika_connection
        transport = RabbitMQTransport("broker")
        errors = []

        def publish_from_other_thread():
            try:
                transport.send("orders.topic", "orders.json", b"{}", "application/json")
            except TransportError as e:
                errors.append(e)

        worker = threading.Thread(target=publish_from_other_thread)
        worker.start()
        worker.join()

        assert len(errors) == 1
        assert "thread" in str(errors[0])
        channel.basic_publish.assert_not_called()

    def test_close(self, pika_connection):
        _, connection, channel = pika_connection
        connection.is_open = True
        channel.is_open = True
        transport = RabbitMQTransport("broker")

        transport.close()

        channel.close.assert_called_once()
        connection.close.assert_called_once()

    def test_implements_shared_transport_interface(self, pika_connection):
        from protocol.transport import Transport

        transport = RabbitMQTransport("broker")

        assert isinstance(transport, Transport)
        assert RabbitMQTransport.__module__.split(".")[0] == Transport.__module__.split(".")[0] == "protocol"
