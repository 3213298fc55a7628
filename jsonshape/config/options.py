from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_MAX_DEPTH = 100

_OPTION_KEYS: tuple[str, ...] = ("strict", "max_depth", "verbose", "messages")

# None is a meaningful max_depth, so "not given" needs its own marker.
_NOT_GIVEN: Any = object()


def validate_options(obj: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(obj, dict):
        return ["options must be an object"]
    for k in obj:
        if k not in _OPTION_KEYS:
            errors.append(f"unknown option: {k}")
    for k in ("strict", "verbose", "messages"):
        if k in obj and not isinstance(obj[k], bool):
            errors.append(f"{k} must be a boolean")
    if "max_depth" in obj:
        v = obj["max_depth"]
        if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 1):
            errors.append("max_depth must be an integer >= 1 or null")
    return errors


@dataclass(frozen=True)
class ValidatorOptions:
    # Lenient (strict=False) passes schema nodes it does not recognize.
    strict: bool = False
    # Deepest descriptor nesting followed; None means unbounded.
    max_depth: int | None = DEFAULT_MAX_DEPTH
    verbose: bool = False
    messages: bool = True

    @staticmethod
    def default() -> "ValidatorOptions":
        return ValidatorOptions()

    @staticmethod
    def from_json_obj(obj: Any) -> "ValidatorOptions":
        problems = validate_options(obj)
        if problems:
            raise ValueError("Invalid validator options:\n" + "\n".join(problems))
        return ValidatorOptions(
            strict=obj.get("strict", False),
            max_depth=obj.get("max_depth", DEFAULT_MAX_DEPTH),
            verbose=obj.get("verbose", False),
            messages=obj.get("messages", True),
        )

    def to_json_obj(self) -> dict[str, Any]:
        return {
            "strict": self.strict,
            "max_depth": self.max_depth,
            "verbose": self.verbose,
            "messages": self.messages,
        }

    def with_overrides(
        self,
        *,
        strict: Any = _NOT_GIVEN,
        max_depth: Any = _NOT_GIVEN,
        verbose: Any = _NOT_GIVEN,
        messages: Any = _NOT_GIVEN,
    ) -> "ValidatorOptions":
        obj = self.to_json_obj()
        given = {"strict": strict, "max_depth": max_depth, "verbose": verbose, "messages": messages}
        obj.update({k: v for k, v in given.items() if v is not _NOT_GIVEN})
        return ValidatorOptions.from_json_obj(obj)


def load_options(path: Path) -> ValidatorOptions:
    obj = json.loads(path.read_text(encoding="utf-8"))
    return ValidatorOptions.from_json_obj(obj)
