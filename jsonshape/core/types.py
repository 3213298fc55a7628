from __future__ import annotations

import decimal
import json
import numbers
from collections.abc import Mapping
from typing import Any


class _Undefined:
    """Marker for a value that is absent (a missing property), as opposed to JSON null."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __copy__(self) -> "_Undefined":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Undefined":
        return self


UNDEFINED = _Undefined()

UNDEFINED_TAG = "undefined"
NULL_TAG = "null"
BOOLEAN_TAG = "boolean"
NUMBER_TAG = "number"
INTEGER_TAG = "integer"
ARRAY_TAG = "array"
OBJECT_TAG = "object"
STRING_TAG = "string"

# "integer" can be declared but classify() never returns it.
TYPE_TAGS: tuple[str, ...] = (
    UNDEFINED_TAG,
    NULL_TAG,
    BOOLEAN_TAG,
    NUMBER_TAG,
    INTEGER_TAG,
    ARRAY_TAG,
    OBJECT_TAG,
    STRING_TAG,
)


def classify(value: Any) -> str:
    """
    Map any value to a coarse type tag.

    Order matters: undefined, null, array, object, boolean, number, then "string"
    for everything not matched above (str, bytes, dates, arbitrary objects).
    """
    if value is UNDEFINED:
        return UNDEFINED_TAG
    if value is None:
        return NULL_TAG
    if isinstance(value, (list, tuple)):
        return ARRAY_TAG
    if isinstance(value, Mapping):
        return OBJECT_TAG
    if isinstance(value, bool):
        return BOOLEAN_TAG
    if isinstance(value, (numbers.Real, decimal.Decimal)):
        return NUMBER_TAG
    return STRING_TAG


def to_text(value: Any) -> str:
    """
    Render a document value as text for pattern tests and messages.
    """
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None or v is UNDEFINED else to_text(v) for v in value)
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def same_value(a: Any, b: Any) -> bool:
    # 1 == True in Python; enum membership must not conflate them, at any nesting level.
    tag = classify(a)
    if tag != classify(b):
        return False
    if tag == ARRAY_TAG:
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    if tag == OBJECT_TAG:
        return set(a.keys()) == set(b.keys()) and all(same_value(a[k], b[k]) for k in a)
    try:
        return bool(a == b)
    except Exception:
        return a is b
