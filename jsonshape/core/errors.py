from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from jsonshape.core.types import UNDEFINED

KEYWORD_TYPE = "type"
KEYWORD_VALUE = "value"
KEYWORD_SCHEMA = "schema"

KEYWORDS: tuple[str, ...] = (KEYWORD_TYPE, KEYWORD_VALUE, KEYWORD_SCHEMA)

UNSET: Any = object()


@dataclass(frozen=True)
class ValidationError:
    """
    One diagnostic produced while matching a document against a schema.

    Field names follow Python conventions; to_json_obj() renders the camelCase wire names.
    schema / parent_schema / data are only populated when verbose diagnostics are enabled.
    """

    keyword: str
    instance_path: str
    message: str | None = None
    schema_path: str | None = None
    params: dict[str, Any] | None = None
    property_name: str | None = None
    schema: Any = UNSET
    parent_schema: Any = UNSET
    data: Any = UNSET

    @property
    def verbose(self) -> bool:
        return self.data is not UNSET

    def to_json_obj(self) -> dict[str, Any]:
        obj: dict[str, Any] = {"keyword": self.keyword, "instancePath": self.instance_path}
        if self.schema_path is not None:
            obj["schemaPath"] = self.schema_path
        if self.params is not None:
            obj["params"] = self.params
        if self.property_name is not None:
            obj["propertyName"] = self.property_name
        if self.message is not None:
            obj["message"] = self.message
        if self.verbose:
            obj["schema"] = _jsonable(self.schema)
            obj["parentSchema"] = _jsonable(self.parent_schema)
            obj["data"] = _jsonable(self.data)
        return obj

    def format(self) -> str:
        return f"{self.instance_path}: {self.message or self.keyword}"


def _jsonable(value: Any) -> Any:
    if value is UNSET or value is UNDEFINED:
        return None
    if hasattr(value, "pattern") and hasattr(value, "search"):
        return value.pattern
    return value


@dataclass(frozen=True)
class ValidationResult:
    """Ordered errors from a single validation call. Valid iff there are none."""

    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def __bool__(self) -> bool:
        return self.is_valid

    def __len__(self) -> int:
        return len(self.errors)

    def keywords(self) -> list[str]:
        return [e.keyword for e in self.errors]

    def format_errors(self) -> list[str]:
        return [e.format() for e in self.errors]

    def to_json_obj(self) -> dict[str, Any]:
        return {"ok": self.is_valid, "errors": [e.to_json_obj() for e in self.errors]}
