from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path
from typing import Any

from jsonshape.config.options import ValidatorOptions, load_options
from jsonshape.core.types import classify
from jsonshape.validation.validator import Validator


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="jsonshape")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="Validate one or more JSON documents against a schema file")
    p_check.add_argument("schema_path", help="Path to the schema JSON file")
    p_check.add_argument("document_paths", nargs="+", help="Document JSON files ('-' reads stdin)")
    p_check.add_argument("--options", default=None, help="Validator options JSON file (strict, max_depth, verbose, messages)")
    p_check.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Report unrecognized schema shapes instead of passing them (default: from options, else lenient)",
    )
    p_check.add_argument("--max-depth", type=int, default=None, help="Maximum schema nesting followed (default: 100)")
    p_check.add_argument("--verbose", action="store_true", default=None, help="Attach schema, parentSchema and data to each error")
    p_check.add_argument("--no-messages", action="store_true", help="Omit human-readable messages from errors")
    p_check.add_argument("--json", action="store_true", help="Emit one JSON object per document")

    p_self = sub.add_parser("selfcheck", help="Run the built-in behavior scenarios")
    p_self.add_argument("--json", action="store_true", help="Emit the scenario report as JSON")

    p_classify = sub.add_parser("classify", help="Print the type tag of a JSON value")
    p_classify.add_argument("value", help="JSON text, e.g. '[1, 2]' or '\"s\"'")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = _parse_args(argv)

    if args.cmd == "classify":
        try:
            value = json.loads(args.value)
        except json.JSONDecodeError as e:
            raise SystemExit(f"not valid JSON: {args.value!r} ({e})")
        print(classify(value))
        return 0

    if args.cmd == "selfcheck":
        from jsonshape.scenarios.runner import run_scenarios

        res = run_scenarios()
        if args.json:
            print(json.dumps(res, ensure_ascii=False, indent=2))
        elif res["ok"]:
            print("OK")
        else:
            print("FAILED", file=sys.stderr)
            for e in res["errors"]:
                print("- " + e, file=sys.stderr)
        return 0 if res["ok"] else 2

    if args.cmd == "check":
        options = _resolve_options(args)
        schema_path = Path(args.schema_path)
        try:
            schema_text = schema_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SystemExit(f"cannot read schema: {schema_path} ({e})")
        try:
            validator = Validator(schema_text, options=options)
        except json.JSONDecodeError as e:
            raise SystemExit(f"schema is not valid JSON: {schema_path} ({e})")

        all_ok = True
        for doc_arg in args.document_paths:
            document = _load_json(None if doc_arg == "-" else Path(doc_arg), "document")
            try:
                result = validator.validate(document).result
            except re.error as e:
                raise SystemExit(f"schema has an invalid matches pattern: {e}")
            all_ok = all_ok and result.is_valid
            if args.json:
                out = {"document": doc_arg, **result.to_json_obj()}
                print(json.dumps(out, ensure_ascii=False, default=str))
            elif result.is_valid:
                print(f"OK {doc_arg}")
            else:
                print(f"FAILED {doc_arg}")
                for line in result.format_errors():
                    print("- " + line)
        return 0 if all_ok else 2

    raise SystemExit(f"Unknown cmd: {args.cmd}")


def _resolve_options(args: argparse.Namespace) -> ValidatorOptions:
    try:
        base = load_options(Path(args.options)) if args.options else ValidatorOptions.default()
        flags = {
            "strict": args.strict,
            "max_depth": args.max_depth,
            "verbose": args.verbose,
            "messages": False if args.no_messages else None,
        }
        # argparse leaves absent flags as None.
        return base.with_overrides(**{k: v for k, v in flags.items() if v is not None})
    except (OSError, json.JSONDecodeError, ValueError) as e:
        raise SystemExit(f"invalid options: {e}")


def _load_json(path: Path | None, what: str) -> Any:
    try:
        if path is None:
            return json.load(sys.stdin)
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SystemExit(f"cannot read {what}: {path} ({e})")
    except json.JSONDecodeError as e:
        raise SystemExit(f"{what} is not valid JSON: {path or '<stdin>'} ({e})")


if __name__ == "__main__":
    raise SystemExit(main())
