"""Error taxonomy shared by the producer and its transport."""


class ProducerError(Exception):
    """Base class for every error raised by the producer."""


class TopologyError(ProducerError):
    """Exchange, queue or binding could not be declared.

    Fatal at startup: the node must not accept publish calls afterwards.
    """


class SerializationError(ProducerError, ValueError):
    """The payload could not be encoded to the wire format."""


class TransportError(ProducerError):
    """The broker rejected the send or the connection is unavailable."""


class UnroutableWarning(UserWarning):
    """The broker accepted a message but no binding matched its routing key."""
