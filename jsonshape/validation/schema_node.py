from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from jsonshape.core.types import STRING_TAG, UNDEFINED, classify, to_text

logger = logging.getLogger(__name__)

# Descriptor fields the engine reads. "pattern" is deliberately absent: the pattern
# check reads "matches".
DESCRIPTOR_FIELDS: tuple[str, ...] = ("type", "enum", "matches", "items", "properties", "optional")


@dataclass(frozen=True)
class TypeSpec:
    """A bare type declaration: one tag ("string") or any of several (["string", "null"])."""

    types: tuple[Any, ...]
    many: bool
    raw: Any = field(compare=False, repr=False)

    def describe(self) -> str:
        if self.many:
            return " | ".join(to_text(t) for t in self.types)
        return to_text(self.types[0])

    def allows(self, tag: str) -> bool:
        return tag in self.types


@dataclass(frozen=True)
class UnknownNode:
    """A schema value of a shape the engine does not interpret."""

    raw: Any = field(repr=False)


@dataclass(frozen=True)
class PropertyMap:
    """Per-key sub-schemas of a descriptor's "properties" mapping, in schema key order."""

    nodes: tuple[tuple[str, "SchemaNode"], ...]
    raw: Any = field(compare=False, repr=False)


@dataclass(frozen=True)
class ObjectSchema:
    """
    A structured descriptor. Fields left as None were absent from the source mapping;
    a key present with JSON null compiles to UnknownNode and still counts as declared.
    """

    type: "TypeSpec | UnknownNode | None" = None
    enum: tuple[Any, ...] | None = None
    matches: "str | re.Pattern[str] | None" = None
    items: "SchemaNode | None" = None
    properties: "TypeSpec | PropertyMap | UnknownNode | None" = None
    optional: bool = False
    declares_pattern: bool = False
    recognized: bool = True
    raw: Any = field(default=None, compare=False, repr=False)


SchemaNode = Union[TypeSpec, ObjectSchema, UnknownNode]


def compile_schema(schema: Any) -> SchemaNode:
    """
    Normalize a schema into a tagged node.

    Strings are parsed as JSON first; a decode failure propagates unchanged. No structural
    validation happens here: shapes the engine cannot interpret compile to UnknownNode.
    """
    if isinstance(schema, (bytes, bytearray)):
        schema = schema.decode("utf-8")
    if isinstance(schema, str):
        schema = json.loads(schema)
    node = compile_node(schema)
    logger.debug("compiled schema node %s", type(node).__name__)
    return node


def compile_node(raw: Any) -> SchemaNode:
    """
    Compile one schema value and everything nested under it.

    Descriptors are compiled children-first from an explicit work stack, so nesting depth is
    limited by memory rather than by the interpreter's recursion limit. Depth itself is bounded
    later, by the matcher.
    """
    if not isinstance(raw, Mapping):
        return _compile_leaf(raw)

    compiled: dict[int, ObjectSchema] = {}
    pending: set[int] = set()
    stack: list[tuple[Mapping[str, Any], bool]] = [(raw, False)]
    while stack:
        descriptor, expanded = stack.pop()
        key = id(descriptor)
        if key in compiled:
            continue
        if expanded:
            pending.discard(key)
            compiled[key] = _compile_descriptor(descriptor, compiled)
            continue
        pending.add(key)
        stack.append((descriptor, True))
        # pending holds exactly the descriptors on the path from the root to this one.
        for child in _nested_descriptors(descriptor):
            if id(child) in pending:
                raise ValueError("schema contains a reference cycle")
            stack.append((child, False))
    return compiled[id(raw)]


def _compile_leaf(raw: Any) -> "TypeSpec | UnknownNode":
    if isinstance(raw, (list, tuple)):
        return TypeSpec(types=tuple(_tag(t) for t in raw), many=True, raw=raw)
    # Dispatch follows classify(): anything it calls a string is a single type tag.
    if classify(raw) == STRING_TAG:
        return TypeSpec(types=(_tag(raw),), many=False, raw=raw)
    return UnknownNode(raw=raw)


def _tag(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        return raw.decode("utf-8")
    return raw


def _nested_descriptors(raw: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    children: list[Any] = []
    if "items" in raw:
        children.append(raw["items"])
    properties = raw.get("properties", UNDEFINED)
    if isinstance(properties, Mapping):
        children.extend(properties.values())
    elif properties is not UNDEFINED:
        children.append(properties)
    return [c for c in children if isinstance(c, Mapping)]


def _compile_descriptor(raw: Mapping[str, Any], compiled: dict[int, ObjectSchema]) -> ObjectSchema:
    def sub(value: Any) -> SchemaNode:
        if isinstance(value, Mapping):
            return compiled[id(value)]
        return _compile_leaf(value)

    declared_type = raw.get("type", UNDEFINED)
    enum = raw.get("enum", UNDEFINED)
    matches = raw.get("matches", UNDEFINED)
    items = raw.get("items", UNDEFINED)
    properties = raw.get("properties", UNDEFINED)

    if properties is UNDEFINED:
        property_node = None
    elif isinstance(properties, Mapping):
        property_node = PropertyMap(nodes=tuple((str(k), sub(v)) for k, v in properties.items()), raw=properties)
    else:
        property_node = _compile_leaf(properties)

    return ObjectSchema(
        type=None if declared_type is UNDEFINED else _compile_type(declared_type),
        enum=tuple(enum) if isinstance(enum, (list, tuple)) else None,
        matches=None if matches is UNDEFINED else _pattern_source(matches),
        items=None if items is UNDEFINED else sub(items),
        properties=property_node,
        optional=bool(raw.get("optional", False)),
        declares_pattern="pattern" in raw and "matches" not in raw,
        recognized=any(k in raw for k in DESCRIPTOR_FIELDS),
        raw=raw,
    )


def _compile_type(raw: Any) -> "TypeSpec | UnknownNode":
    if isinstance(raw, Mapping):
        return UnknownNode(raw=raw)
    return _compile_leaf(raw)


def _pattern_source(raw: Any) -> "str | re.Pattern[str]":
    if isinstance(raw, re.Pattern):
        return raw
    if isinstance(raw, str):
        return raw
    return to_text(raw)
