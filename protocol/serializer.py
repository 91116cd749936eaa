from __future__ import annotations

"""Wire serializers used by the publishers.

Both serializers are stateless and safe to share between publishers.  They
return the encoded body together with the content type that travels in the
AMQP message properties.
"""

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, Tuple

from common.errors import SerializationError

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"
ENCODING = "utf-8"


class JsonSerializer:
    """Encodes a domain object as compact UTF-8 JSON.

    Accepted payloads: dataclass instances, mappings, lists/tuples, JSON
    scalars and any object exposing a ``to_dict()`` method.  Nested values
    follow the same rules.
    """

    content_type = JSON_CONTENT_TYPE

    def serialize(self, payload: Any) -> Tuple[bytes, str]:
        try:
            self._check_keys(payload, set())
            body = json.dumps(
                payload,
                default=self._to_primitive,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            ).encode(ENCODING)
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(
                f"Could not encode {type(payload).__name__} as JSON: {e}"
            ) from e
        return body, self.content_type

    def deserialize(self, body: bytes) -> Any:
        """Inverse of ``serialize``; returns plain JSON values."""
        return json.loads(body.decode(ENCODING))

    @classmethod
    def _to_primitive(cls, value: Any) -> Any:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            # Shallow on purpose: nested dataclasses go through this hook again,
            # which keeps json's circular reference check effective.
            result = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        elif isinstance(value, Mapping):
            result = dict(value)
        else:
            to_dict = getattr(value, "to_dict", None)
            if not callable(to_dict):
                raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
            try:
                result = to_dict()
            except Exception as e:
                raise TypeError(f"{type(value).__name__}.to_dict() failed: {e!r}") from e
        cls._check_keys(result, set())
        return result

    @classmethod
    def _check_keys(cls, value: Any, active: set) -> None:
        """Rejects mapping keys that json would silently turn into strings.

        Walks the dicts, lists and tuples json encodes natively; other objects
        are checked when they reach ``_to_primitive``.
        """
        if not isinstance(value, (dict, list, tuple)) or id(value) in active:
            # cycles are reported by json itself
            return
        active.add(id(value))
        if isinstance(value, dict):
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TypeError(f"Mapping keys must be str, got {type(key).__name__} {key!r}")
                cls._check_keys(item, active)
        else:
            for item in value:
                cls._check_keys(item, active)
        active.discard(id(value))


class TextSerializer:
    """Encodes a ``str`` payload as UTF-8 plain text."""

    content_type = TEXT_CONTENT_TYPE

    def serialize(self, payload: Any) -> Tuple[bytes, str]:
        if not isinstance(payload, str):
            raise SerializationError(
                f"Text messages must be str, got {type(payload).__name__}"
            )
        try:
            return payload.encode(ENCODING), self.content_type
        except UnicodeEncodeError as e:
            raise SerializationError(f"Could not encode text message: {e}") from e

    def deserialize(self, body: bytes) -> str:
        return body.decode(ENCODING)
