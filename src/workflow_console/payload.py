"""Opaque JSON payloads (node configuration, instance context).

The core never schema-checks these blobs. They travel verbatim, and only a
caller that actually needs the content parses them, strictly, at that point.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

from workflow_console.errors import MalformedPayload

EMPTY_OBJECT = "{}"


@dataclass(frozen=True, slots=True)
class OpaqueJson:
    """A JSON document kept as text until it is explicitly parsed."""

    raw: str = EMPTY_OBJECT

    @classmethod
    def of(cls, value: OpaqueJson | Mapping[str, object] | str | None) -> OpaqueJson:
        if value is None:
            return cls()
        if isinstance(value, OpaqueJson):
            return value
        if isinstance(value, str):
            return cls(raw=value)
        if isinstance(value, Mapping):
            return cls(raw=json.dumps(dict(value), ensure_ascii=False))
        raise TypeError(f"Unsupported opaque payload value: {type(value).__name__}")

    def parse(self) -> object:
        try:
            return json.loads(self.raw)
        except json.JSONDecodeError as e:
            raise MalformedPayload(f"Payload is not valid JSON: {e.msg}") from e

    def parse_object(self) -> dict[str, object]:
        parsed = self.parse()
        if not isinstance(parsed, dict):
            raise MalformedPayload("Payload is not a JSON object")
        return parsed

    def __str__(self) -> str:
        return self.raw
