from __future__ import annotations

import json
from typing import Any

from jsonshape.core.types import UNDEFINED
from jsonshape.validation.validator import Validator


def _expect(errors: list[str], name: str, schema: Any, document: Any, *, valid: bool, paths: list[str] | None = None, keywords: list[str] | None = None) -> Validator:
    v = Validator.run(schema, document)
    if v.is_valid is not valid:
        errors.append(f"{name}: expected valid={valid}, got errors={[e.format() for e in v.errors]}")
        return v
    if paths is not None and [e.instance_path for e in v.errors] != paths:
        errors.append(f"{name}: expected paths {paths}, got {[e.instance_path for e in v.errors]}")
    if keywords is not None and [e.keyword for e in v.errors] != keywords:
        errors.append(f"{name}: expected keywords {keywords}, got {[e.keyword for e in v.errors]}")
    return v


def run_scenarios() -> dict:
    """
    End-to-end behavior scenarios through the public Validator API.

    Covers the documented matching rules: type, enum, implicit required properties,
    optional, item short-circuit, the JSON-string schema form and repeat validation.
    """
    errors: list[str] = []

    _expect(errors, "string ok", {"type": "string"}, "hello", valid=True)
    _expect(errors, "string vs number", {"type": "string"}, 5, valid=False, paths=["$"], keywords=["type"])
    _expect(errors, "enum miss", {"type": "number", "enum": [1, 2, 3]}, 4, valid=False, keywords=["value"])
    _expect(
        errors,
        "nested property type",
        {"type": "object", "properties": {"a": {"type": "number"}}},
        {"a": "x"},
        valid=False,
        paths=["$.a"],
        keywords=["type"],
    )
    _expect(
        errors,
        "missing property",
        {"type": "object", "properties": {"a": {"type": "number"}}},
        {},
        valid=False,
        paths=["$.a"],
        keywords=["type"],
    )
    _expect(
        errors,
        "items stop at first failure",
        {"type": "array", "items": {"type": "number"}},
        [1, 2, "x", 4],
        valid=False,
        paths=["$[2]"],
    )
    _expect(errors, "optional absent", {"type": "string", "optional": True}, UNDEFINED, valid=True)
    _expect(errors, "optional present wrong type", {"type": "string", "optional": True}, 3, valid=False, keywords=["type"])
    _expect(errors, "json string schema", json.dumps({"type": ["string", "null"]}), None, valid=True)

    v = Validator({"type": "object", "properties": {"a": "number", "b": {"type": "string"}}})
    first = [e.to_json_obj() for e in v.validate({"a": True}).errors]
    second = [e.to_json_obj() for e in v.validate({"a": True}).errors]
    if first != second:
        errors.append(f"repeat validation differs: {first} != {second}")

    return {"ok": not errors, "errors": errors}
