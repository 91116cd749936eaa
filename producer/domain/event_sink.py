from __future__ import annotations

"""Observability hook for the publish path.

Publishers report what happened to each message as a named event with
structured fields instead of formatting log lines themselves.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

PUBLISHED = "published"
PUBLISH_FAILED = "publish_failed"
UNROUTABLE = "unroutable"


class EventSink(ABC):
    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        pass


class LoggingEventSink(EventSink):
    """Writes events to the standard logging module."""

    _LEVELS = {
        PUBLISHED: logging.INFO,
        PUBLISH_FAILED: logging.ERROR,
        UNROUTABLE: logging.WARNING,
    }

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("producer.events")

    def emit(self, event: str, **fields: Any) -> None:
        level = self._LEVELS.get(event, logging.INFO)
        details = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        self._logger.log(level, "[%s] %s", event, details, extra={"event": event, "fields": fields})
