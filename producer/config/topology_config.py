from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping

# Property name -> field name.  Property names may also carry a "rabbitmq." prefix.
PROPERTY_NAMES = {
    "queue.name": "queue_name",
    "queue.json.name": "json_queue_name",
    "exchange.name": "exchange_name",
    "routing.key": "routing_key",
    "routing.json.key": "json_routing_key",
}
PROPERTY_PREFIX = "rabbitmq."


@dataclass(frozen=True)
class TopologyConfig:
    """Broker object names the producer declares and publishes to.

    All five names are required; there are no defaults.
    """

    exchange_name: str
    queue_name: str
    json_queue_name: str
    routing_key: str
    json_routing_key: str

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Topology setting '{field.name}' must be a non-empty string, got {value!r}")

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> TopologyConfig:
        """Build from dotted property names, e.g. ``{"exchange.name": "orders.topic"}``."""
        values = {}
        for prop, field_name in PROPERTY_NAMES.items():
            if prop in properties:
                values[field_name] = properties[prop]
            elif PROPERTY_PREFIX + prop in properties:
                values[field_name] = properties[PROPERTY_PREFIX + prop]
            else:
                raise KeyError(f"Key was not found: '{prop}'. Aborting producer")
        return cls(**values)
