import pytest

from producer.config.topology_config import TopologyConfig
from tests.fakes import InMemoryBroker


@pytest.fixture
def topology_config():
    return TopologyConfig(
        exchange_name="orders.topic",
        queue_name="orders.queue",
        json_queue_name="orders.json.queue",
        routing_key="orders.plain",
        json_routing_key="orders.json",
    )


@pytest.fixture
def broker():
    return InMemoryBroker()


@pytest.fixture
def node_config(topology_config):
    return {"topology": topology_config, "rabbit_host": "localhost"}
