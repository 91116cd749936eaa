from dataclasses import dataclass


@dataclass
class User:
    """Payload carried by the JSON queue."""

    id: int
    name: str
