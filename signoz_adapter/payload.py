"""JSON payload detection — a tagged view over whatever ``json.loads`` returns."""

from __future__ import annotations

import json
from typing import Any


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


class JsonValue:
    """A parsed JSON document with explicit accessors for field extraction.

    ``kind`` is one of ``null``, ``bool``, ``number``, ``string``, ``array``
    or ``object``.
    """

    def __init__(self, value: Any):
        self._value = value

    @property
    def kind(self) -> str:
        value = self._value
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "bool"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if isinstance(value, list):
            return "array"
        return "object"

    @property
    def value(self) -> Any:
        return self._value

    def is_object(self) -> bool:
        return isinstance(self._value, dict)

    def get(self, key: str) -> Any:
        """Return the raw value stored under *key*, or None for non-objects."""
        if not self.is_object():
            return None
        return self._value.get(key)

    def get_string(self, key: str) -> str | None:
        """Return the value under *key* only if it is a JSON string."""
        value = self.get(key)
        return value if isinstance(value, str) else None

    def items(self):
        if not self.is_object():
            return iter(())
        return iter(self._value.items())

    def __repr__(self) -> str:
        return f"JsonValue(kind={self.kind!r})"


def parse_payload(data: str) -> JsonValue | None:
    """Parse *data* as JSON.

    Returns None when the text is not valid JSON. The literal ``null`` is also
    reported as None: a payload of ``null`` carries no value to extract.
    """
    try:
        value = json.loads(data, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError):
        return None
    if value is None:
        return None
    return JsonValue(value)


def stringify(value: Any) -> str:
    """Render a JSON value as an attribute string.

    Strings pass through and integral floats drop their fraction; everything
    else uses its compact JSON form, so ``3.0`` -> ``"3"``, ``True`` ->
    ``"true"``, ``{"a": 1}`` -> ``'{"a":1}'``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
