from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from jsonshape.config.options import ValidatorOptions
from jsonshape.core.errors import (
    KEYWORD_SCHEMA,
    KEYWORD_TYPE,
    KEYWORD_VALUE,
    UNSET,
    ValidationError,
    ValidationResult,
)
from jsonshape.core.types import ARRAY_TAG, OBJECT_TAG, UNDEFINED, classify, same_value, to_text
from jsonshape.validation.schema_node import (
    DESCRIPTOR_FIELDS,
    ObjectSchema,
    PropertyMap,
    SchemaNode,
    TypeSpec,
    UnknownNode,
    compile_schema,
)

logger = logging.getLogger(__name__)

ROOT_INSTANCE_PATH = "$"
ROOT_SCHEMA_PATH = "#"

# Reported as the instancePath of the "properties on a non-object" error instead of the
# real location. Kept for compatibility with existing consumers of these records.
PROPERTIES_SHAPE_INSTANCE_PATH = "path"


@dataclass
class MatchContext:
    """Per-call error accumulator. One context per validation; never shared."""

    options: ValidatorOptions = field(default_factory=ValidatorOptions.default)
    errors: list[ValidationError] = field(default_factory=list)
    depth: int = 0

    def log(
        self,
        keyword: str,
        instance_path: str,
        message: str,
        *,
        schema_path: str,
        params: dict[str, Any] | None = None,
        property_name: str | None = None,
        schema: Any = UNSET,
        parent_schema: Any = UNSET,
        data: Any = UNSET,
    ) -> None:
        verbose = self.options.verbose
        self.errors.append(
            ValidationError(
                keyword=keyword,
                instance_path=instance_path,
                message=message if self.options.messages else None,
                schema_path=schema_path,
                params=params,
                property_name=property_name,
                schema=schema if verbose else UNSET,
                parent_schema=parent_schema if verbose else UNSET,
                data=data if verbose else UNSET,
            )
        )

    def result(self) -> ValidationResult:
        return ValidationResult(errors=tuple(self.errors))


def validate_document(schema: Any, document: Any, options: ValidatorOptions | None = None) -> ValidationResult:
    """
    Match one document against a schema and return a fresh result.

    schema may be an already compiled node, a structured schema, or a JSON string.
    Safe to call concurrently: no state survives the call.
    """
    node = schema if isinstance(schema, (TypeSpec, ObjectSchema, UnknownNode)) else compile_schema(schema)
    ctx = MatchContext(options=options or ValidatorOptions.default())
    match(node, document, ROOT_INSTANCE_PATH, ctx)
    result = ctx.result()
    logger.debug("validated document: %d error(s)", len(result.errors))
    return result


def match(
    node: SchemaNode,
    document: Any,
    path: str,
    ctx: MatchContext,
    schema_path: str = ROOT_SCHEMA_PATH,
    parent: Any = UNSET,
) -> bool:
    if isinstance(node, TypeSpec):
        return _matches_type(node, document, path, ctx, schema_path, parent)
    if isinstance(node, ObjectSchema):
        return _matches_descriptor(node, document, path, ctx, schema_path)
    return _unrecognized(node, document, path, ctx, schema_path, parent, "schema node is neither a type nor a descriptor")


def _matches_descriptor(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    max_depth = ctx.options.max_depth
    if max_depth is not None and ctx.depth >= max_depth:
        ctx.log(
            KEYWORD_SCHEMA,
            path,
            f"schema nesting exceeds maximum depth {max_depth}",
            schema_path=schema_path,
            params={"maxDepth": max_depth},
            schema=node.raw,
            data=document,
        )
        return False

    ctx.depth += 1
    try:
        return _run_checks(node, document, path, ctx, schema_path)
    finally:
        ctx.depth -= 1


def _run_checks(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    if not node.recognized:
        fields = ", ".join(DESCRIPTOR_FIELDS)
        return _unrecognized(node, document, path, ctx, schema_path, node.raw, f"descriptor declares none of {fields}")
    if node.declares_pattern and ctx.options.strict:
        return _unrecognized(node, document, path, ctx, schema_path, node.raw, "pattern is not enforced; declare matches")

    # Checks run in a fixed order and stop at the first failure.
    if not _matches_type_field(node, document, path, ctx, schema_path):
        return False
    if not _matches_enum(node, document, path, ctx, schema_path):
        return False
    if not _matches_pattern(node, document, path, ctx, schema_path):
        return False
    if not _matches_items(node, document, path, ctx, schema_path):
        return False
    if not _matches_properties(node, document, path, ctx, schema_path):
        return False
    return True


def _matches_type_field(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    declared = node.type
    if declared is None:
        return True
    # optional only excuses an absent value, never a present one of the wrong type.
    if node.optional and document is UNDEFINED:
        return True
    sp = f"{schema_path}/type"
    if isinstance(declared, TypeSpec):
        return _matches_type(declared, document, path, ctx, sp, node.raw)
    return _unrecognized(declared, document, path, ctx, sp, node.raw, "type is neither a tag nor a list of tags")


def _matches_type(
    spec: TypeSpec,
    document: Any,
    path: str,
    ctx: MatchContext,
    schema_path: str,
    parent: Any = UNSET,
    property_name: str | None = None,
) -> bool:
    doc_type = classify(document)
    if spec.allows(doc_type):
        return True
    ctx.log(
        KEYWORD_TYPE,
        path,
        f"must be {spec.describe()}, but it was {doc_type}",
        schema_path=schema_path,
        params={"type": spec.raw},
        property_name=property_name,
        schema=spec.raw,
        parent_schema=parent,
        data=document,
    )
    return False


def _matches_enum(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    allowed = node.enum
    if allowed is None:
        return True
    if any(same_value(document, v) for v in allowed):
        return True
    values = ", ".join(to_text(v) for v in allowed)
    ctx.log(
        KEYWORD_VALUE,
        path,
        f"value must be in enum {values}, but it was {to_text(document)}",
        schema_path=f"{schema_path}/enum",
        params={"allowedValues": list(allowed)},
        schema=list(allowed),
        parent_schema=node.raw,
        data=document,
    )
    return False


def _matches_pattern(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    if node.matches is None:
        return True
    regex = _compile_pattern(node.matches)
    text = to_text(document)
    if regex.search(text) is not None:
        return True
    ctx.log(
        KEYWORD_VALUE,
        path,
        f"value {text} did not match {regex.pattern}",
        schema_path=f"{schema_path}/matches",
        params={"pattern": regex.pattern},
        schema=regex.pattern,
        parent_schema=node.raw,
        data=document,
    )
    return False


def _matches_items(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    items = node.items
    if items is None:
        return True
    sp = f"{schema_path}/items"
    if classify(document) != ARRAY_TAG:
        ctx.log(
            KEYWORD_SCHEMA,
            path,
            "must be an array, but schema defines items.",
            schema_path=sp,
            params={"expected": ARRAY_TAG},
            schema=_raw(items),
            parent_schema=node.raw,
            data=document,
        )
        return False
    if isinstance(items, UnknownNode):
        return _unrecognized(items, document, path, ctx, sp, node.raw, "items is neither a type nor a descriptor")

    # Elements after the first failing one are not visited.
    for index, element in enumerate(document):
        if not match(items, element, f"{path}[{index}]", ctx, sp, node.raw):
            return False
    return True


def _matches_properties(node: ObjectSchema, document: Any, path: str, ctx: MatchContext, schema_path: str) -> bool:
    properties = node.properties
    if properties is None:
        return True
    sp = f"{schema_path}/properties"
    if classify(document) != OBJECT_TAG:
        ctx.log(
            KEYWORD_SCHEMA,
            PROPERTIES_SHAPE_INSTANCE_PATH,
            "must be an object, but schema defines properties.",
            schema_path=sp,
            params={"expected": OBJECT_TAG},
            schema=_raw(properties),
            parent_schema=node.raw,
            data=document,
        )
        return False

    if isinstance(properties, TypeSpec):
        # Every value present in the document must have the declared type.
        for key, value in document.items():
            if not _matches_type(properties, value, f"{path}.{key}", ctx, sp, node.raw, property_name=str(key)):
                return False
        return True

    if isinstance(properties, PropertyMap):
        # Schema keys drive the walk; a key missing from the document is matched as UNDEFINED.
        for key, sub in properties.nodes:
            value = document.get(key, UNDEFINED)
            if not match(sub, value, f"{path}.{key}", ctx, f"{sp}/{_pointer_escape(key)}", node.raw):
                return False
        return True

    return _unrecognized(properties, document, path, ctx, sp, node.raw, "properties is neither a type nor a mapping")


def _unrecognized(
    node: Any,
    document: Any,
    path: str,
    ctx: MatchContext,
    schema_path: str,
    parent: Any,
    reason: str,
) -> bool:
    if not ctx.options.strict:
        return True
    ctx.log(
        KEYWORD_SCHEMA,
        path,
        f"unrecognized schema: {reason}",
        schema_path=schema_path,
        params={"reason": reason},
        schema=_raw(node),
        parent_schema=parent,
        data=document,
    )
    return False


@functools.lru_cache(maxsize=256)
def _compile_source(source: str) -> re.Pattern[str]:
    return re.compile(source)


def _compile_pattern(pattern: "str | re.Pattern[str]") -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return _compile_source(pattern)


def _pointer_escape(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def _raw(node: Any) -> Any:
    return getattr(node, "raw", node)
