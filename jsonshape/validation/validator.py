from __future__ import annotations

from typing import Any, Callable

from jsonshape.config.options import ValidatorOptions
from jsonshape.core.errors import ValidationError, ValidationResult
from jsonshape.validation.matching import validate_document
from jsonshape.validation.schema_node import SchemaNode, compile_schema


class Validator:
    """
    Holds one compiled schema and the result of the latest validate() call.

    validate() swaps in a fresh result wholesale and returns self, so calls chain:
        Validator(schema).validate(doc).is_valid
    check() returns the result without touching the instance and is safe to call from
    several threads against the same compiled schema.
    """

    @staticmethod
    def run(schema: Any, document: Any, options: ValidatorOptions | None = None) -> "Validator":
        validator = Validator(schema, options=options)
        validator.validate(document)
        return validator

    def __init__(self, schema: Any, options: ValidatorOptions | None = None) -> None:
        self._options = options or ValidatorOptions.default()
        self._result = ValidationResult()
        self._schema: SchemaNode
        self.compile(schema)

    @property
    def options(self) -> ValidatorOptions:
        return self._options

    @property
    def schema(self) -> SchemaNode:
        return self._schema

    @property
    def result(self) -> ValidationResult:
        return self._result

    @property
    def is_valid(self) -> bool:
        return self._result.is_valid

    @property
    def errors(self) -> list[ValidationError]:
        return list(self._result.errors)

    def compile(self, schema: Any) -> Callable[[Any], "Validator"]:
        self._schema = compile_schema(schema)
        return self.validate

    def check(self, document: Any) -> ValidationResult:
        return validate_document(self._schema, document, self._options)

    def validate(self, document: Any) -> "Validator":
        self._result = self.check(document)
        return self

    def __repr__(self) -> str:
        return f"Validator(schema={self._schema!r}, errors={len(self._result.errors)})"
