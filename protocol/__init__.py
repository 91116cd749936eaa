"""Transport and wire-format helpers shared by the producer."""

from .serializer import JSON_CONTENT_TYPE, TEXT_CONTENT_TYPE, JsonSerializer, TextSerializer

__all__ = ["JSON_CONTENT_TYPE", "TEXT_CONTENT_TYPE", "JsonSerializer", "TextSerializer"]
