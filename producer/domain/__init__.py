from .message import OutgoingMessage
from .topology import Binding, Exchange, Queue, Topology
from .user import User

__all__ = ["Binding", "Exchange", "OutgoingMessage", "Queue", "Topology", "User"]
