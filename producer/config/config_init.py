from configparser import ConfigParser
import os
import logging

from producer.config.topology_config import TopologyConfig

CONFIG_FILE = "config.ini"

# config key -> TopologyConfig field
TOPOLOGY_KEYS = {
    "EXCHANGE_NAME": "exchange_name",
    "QUEUE_NAME": "queue_name",
    "QUEUE_JSON_NAME": "json_queue_name",
    "ROUTING_KEY": "routing_key",
    "ROUTING_JSON_KEY": "json_routing_key",
}

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def _parse_bool(name, value):
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value}")


def initialize_config(config_file=CONFIG_FILE):
    """ Parse env variables or config file to find program config params

    Environment variables take precedence over the config file.  The topology
    names (exchange, queues and routing keys) have no defaults: if one is
    missing a KeyError is raised, if one is empty or a numeric/boolean value
    can't be parsed a ValueError is raised.  Both abort the producer before
    any connection is opened.
    """
    config = ConfigParser(os.environ)
    # If config.ini does not exist the original config object is not modified
    config.read(config_file)

    config_params = {}
    try:
        # General Config
        config_params["logging_level"] = os.getenv('LOGGING_LEVEL', config["DEFAULT"].get("LOGGING_LEVEL", "INFO"))

        # RabbitMQ Connection
        rabbit = config["RABBITMQ"] if config.has_section("RABBITMQ") else config["DEFAULT"]
        config_params["rabbit_host"] = os.getenv('RABBIT_HOST', rabbit.get("RABBIT_HOST", "rabbitmq"))
        config_params["rabbit_port"] = int(os.getenv('RABBIT_PORT', rabbit.get("RABBIT_PORT", "5672")))
        config_params["heartbeat"] = int(os.getenv('RABBIT_HEARTBEAT', rabbit.get("RABBIT_HEARTBEAT", "600")))
        config_params["blocked_connection_timeout"] = int(os.getenv(
            'RABBIT_BLOCKED_CONNECTION_TIMEOUT', rabbit.get("RABBIT_BLOCKED_CONNECTION_TIMEOUT", "300")))
        config_params["connect_retries"] = int(os.getenv('RABBIT_CONNECT_RETRIES', rabbit.get("RABBIT_CONNECT_RETRIES", "5")))
        config_params["connect_delay"] = float(os.getenv('RABBIT_CONNECT_DELAY', rabbit.get("RABBIT_CONNECT_DELAY", "5")))
        config_params["confirm_delivery"] = _parse_bool(
            "RABBIT_CONFIRM_DELIVERY",
            os.getenv('RABBIT_CONFIRM_DELIVERY', rabbit.get("RABBIT_CONFIRM_DELIVERY", "false")),
        )

        # Topology names
        topology_values = {}
        for key, field_name in TOPOLOGY_KEYS.items():
            topology_values[field_name] = os.getenv(key, rabbit[key])
        config_params["topology"] = TopologyConfig(**topology_values)

    except KeyError as e:
        raise KeyError(f"Key was not found. Error: {e}. Aborting producer")
    except ValueError as e:
        raise ValueError(f"Key could not be parsed. Error: {e}. Aborting producer")

    if config_params["connect_retries"] < 1:
        raise ValueError("RABBIT_CONNECT_RETRIES must be at least 1. Aborting producer")

    logging.info(f"Producer Config Initialized. Exchange: {config_params['topology'].exchange_name}")
    return config_params
