from __future__ import annotations

import re
import unittest

from jsonshape.config.options import ValidatorOptions
from jsonshape.core.types import UNDEFINED
from jsonshape.validation.matching import validate_document


def _paths(result) -> list[str]:
    return [e.instance_path for e in result.errors]


class TypeCheckTests(unittest.TestCase):
    def test_string_matches(self) -> None:
        res = validate_document({"type": "string"}, "hello")
        self.assertTrue(res.is_valid)
        self.assertEqual(res.errors, ())

    def test_single_type_mismatch(self) -> None:
        res = validate_document({"type": "string"}, 5)
        self.assertFalse(res.is_valid)
        self.assertEqual(len(res.errors), 1)
        err = res.errors[0]
        self.assertEqual(err.keyword, "type")
        self.assertEqual(err.instance_path, "$")
        self.assertEqual(err.schema_path, "#/type")
        self.assertEqual(err.params, {"type": "string"})
        self.assertEqual(err.message, "must be string, but it was number")

    def test_type_list_membership(self) -> None:
        self.assertTrue(validate_document({"type": ["string", "null"]}, None).is_valid)
        res = validate_document({"type": ["string", "null"]}, 3)
        self.assertEqual(res.errors[0].message, "must be string | null, but it was number")

    def test_bare_type_spec_at_root(self) -> None:
        res = validate_document(["number"], "x")
        self.assertEqual(_paths(res), ["$"])
        self.assertEqual(res.errors[0].schema_path, "#")
        self.assertTrue(validate_document(["number", "boolean"], False).is_valid)

    def test_integer_never_matches(self) -> None:
        res = validate_document({"type": "integer"}, 3)
        self.assertEqual(res.keywords(), ["type"])
        self.assertEqual(res.errors[0].message, "must be integer, but it was number")


class EnumCheckTests(unittest.TestCase):
    def test_type_passes_enum_fails(self) -> None:
        res = validate_document({"type": "number", "enum": [1, 2, 3]}, 4)
        self.assertEqual(res.keywords(), ["value"])
        err = res.errors[0]
        self.assertEqual(err.message, "value must be in enum 1, 2, 3, but it was 4")
        self.assertEqual(err.schema_path, "#/enum")
        self.assertEqual(err.params, {"allowedValues": [1, 2, 3]})

    def test_enum_member(self) -> None:
        self.assertTrue(validate_document({"enum": ["a", "b"]}, "b").is_valid)

    def test_enum_uses_strict_equality(self) -> None:
        self.assertFalse(validate_document({"enum": [1, 0]}, True).is_valid)
        self.assertFalse(validate_document({"enum": [True]}, 1).is_valid)
        self.assertFalse(validate_document({"enum": [[1]]}, [True]).is_valid)
        self.assertTrue(validate_document({"enum": [(1, 2)]}, [1, 2]).is_valid)

    def test_type_failure_stops_before_enum(self) -> None:
        res = validate_document({"type": "number", "enum": [1]}, "a")
        self.assertEqual(res.keywords(), ["type"])

    def test_non_array_enum_is_ignored(self) -> None:
        self.assertTrue(validate_document({"type": "string", "enum": "abc"}, "zzz").is_valid)


class PatternCheckTests(unittest.TestCase):
    def test_search_semantics(self) -> None:
        self.assertTrue(validate_document({"matches": "^ab"}, "abc").is_valid)
        self.assertTrue(validate_document({"matches": "b"}, "abc").is_valid)

    def test_mismatch(self) -> None:
        res = validate_document({"type": "string", "matches": "^ab"}, "xab")
        self.assertEqual(res.keywords(), ["value"])
        self.assertEqual(res.errors[0].message, "value xab did not match ^ab")
        self.assertEqual(res.errors[0].schema_path, "#/matches")
        self.assertEqual(res.errors[0].params, {"pattern": "^ab"})

    def test_document_is_coerced_to_text(self) -> None:
        self.assertTrue(validate_document({"matches": r"^\d+$"}, 12).is_valid)
        self.assertTrue(validate_document({"matches": "^true$"}, True).is_valid)
        self.assertTrue(validate_document({"matches": "^null$"}, None).is_valid)

    def test_compiled_pattern(self) -> None:
        self.assertTrue(validate_document({"matches": re.compile("^X", re.IGNORECASE)}, "xy").is_valid)

    def test_pattern_field_is_not_enforced(self) -> None:
        self.assertTrue(validate_document({"type": "string", "pattern": "^z"}, "abc").is_valid)

    def test_invalid_regex_raises(self) -> None:
        with self.assertRaises(re.error):
            validate_document({"matches": "("}, "abc")


class ItemsCheckTests(unittest.TestCase):
    def test_requires_array(self) -> None:
        res = validate_document({"items": "number"}, {"a": 1})
        self.assertEqual(res.keywords(), ["schema"])
        err = res.errors[0]
        self.assertEqual(err.instance_path, "$")
        self.assertEqual(err.message, "must be an array, but schema defines items.")
        self.assertEqual(err.params, {"expected": "array"})

    def test_type_spec_items(self) -> None:
        res = validate_document({"type": "array", "items": "number"}, [1, "x", 2])
        self.assertEqual(_paths(res), ["$[1]"])
        self.assertEqual(res.errors[0].schema_path, "#/items")

    def test_stops_at_first_failing_element(self) -> None:
        res = validate_document({"type": "array", "items": {"type": "number"}}, [1, 2, "x", 4])
        self.assertFalse(res.is_valid)
        self.assertEqual(_paths(res), ["$[2]"])
        res = validate_document({"type": "array", "items": {"type": "number"}}, [1, "x", "y"])
        self.assertEqual(_paths(res), ["$[1]"])

    def test_descriptor_items_recurse(self) -> None:
        schema = {"type": "array", "items": {"type": "object", "properties": {"a": "number"}}}
        res = validate_document(schema, [{"a": 1}, {"a": "x"}])
        self.assertEqual(_paths(res), ["$[1].a"])
        self.assertEqual(res.errors[0].schema_path, "#/items/properties/a")

    def test_empty_array(self) -> None:
        self.assertTrue(validate_document({"type": "array", "items": "string"}, []).is_valid)

    def test_present_null_items_still_requires_array(self) -> None:
        self.assertTrue(validate_document({"items": None}, [1, "a"]).is_valid)
        self.assertEqual(validate_document({"items": None}, "s").keywords(), ["schema"])


class PropertiesCheckTests(unittest.TestCase):
    def test_nested_type_error_path(self) -> None:
        res = validate_document({"type": "object", "properties": {"a": {"type": "number"}}}, {"a": "x"})
        self.assertEqual(res.keywords(), ["type"])
        self.assertEqual(_paths(res), ["$.a"])
        self.assertEqual(res.errors[0].schema_path, "#/properties/a/type")

    def test_missing_key_is_undefined(self) -> None:
        res = validate_document({"type": "object", "properties": {"a": {"type": "number"}}}, {})
        self.assertEqual(_paths(res), ["$.a"])
        self.assertEqual(res.errors[0].message, "must be number, but it was undefined")

    def test_missing_key_with_bare_tag(self) -> None:
        res = validate_document({"properties": {"a": "number"}}, {})
        self.assertEqual(_paths(res), ["$.a"])

    def test_optional_rescues_only_missing(self) -> None:
        schema = {"properties": {"a": {"type": "number", "optional": True}}}
        self.assertTrue(validate_document(schema, {}).is_valid)
        self.assertEqual(_paths(validate_document(schema, {"a": None})), ["$.a"])
        self.assertEqual(_paths(validate_document(schema, {"a": "1"})), ["$.a"])

    def test_optional_does_not_skip_later_checks(self) -> None:
        res = validate_document({"type": "string", "enum": ["a"], "optional": True}, UNDEFINED)
        self.assertEqual(res.keywords(), ["value"])

    def test_undefined_in_type_list(self) -> None:
        self.assertTrue(validate_document({"properties": {"a": {"type": ["number", "undefined"]}}}, {}).is_valid)

    def test_stops_at_first_failing_schema_key(self) -> None:
        res = validate_document({"properties": {"a": "number", "b": "number"}}, {"a": "x", "b": "y"})
        self.assertEqual(_paths(res), ["$.a"])

    def test_extra_document_keys_ignored(self) -> None:
        self.assertTrue(validate_document({"properties": {"a": "number"}}, {"a": 1, "z": "q"}).is_valid)

    def test_type_spec_properties_walk_document_keys(self) -> None:
        res = validate_document({"properties": "number"}, {"a": 1, "b": "x", "c": "y"})
        self.assertEqual(_paths(res), ["$.b"])
        err = res.errors[0]
        self.assertEqual(err.property_name, "b")
        self.assertEqual(err.schema_path, "#/properties")
        self.assertTrue(validate_document({"properties": ["number", "string"]}, {"a": 1, "b": "x"}).is_valid)

    def test_non_object_reports_literal_path(self) -> None:
        res = validate_document({"properties": {"a": "number"}}, [1])
        self.assertEqual(res.keywords(), ["schema"])
        self.assertEqual(res.errors[0].instance_path, "path")
        self.assertEqual(res.errors[0].message, "must be an object, but schema defines properties.")

        nested = {"properties": {"child": {"properties": {"x": "number"}}}}
        res = validate_document(nested, {"child": 5})
        self.assertEqual(_paths(res), ["path"])
        self.assertEqual(res.errors[0].schema_path, "#/properties/child/properties")

    def test_schema_path_escapes_keys(self) -> None:
        res = validate_document({"properties": {"a/b": "number", "c~d": "number"}}, {"a/b": "x"})
        self.assertEqual(res.errors[0].schema_path, "#/properties/a~1b")
        self.assertEqual(_paths(res), ["$.a/b"])


class CheckOrderTests(unittest.TestCase):
    def test_enum_before_pattern(self) -> None:
        schema = {"type": "string", "enum": ["a"], "matches": "^z"}
        self.assertEqual(validate_document(schema, "b").errors[0].schema_path, "#/enum")
        self.assertEqual(validate_document(schema, "a").errors[0].message, "value a did not match ^z")

    def test_items_before_properties(self) -> None:
        schema = {"items": "number", "properties": "number"}
        res = validate_document(schema, {})
        self.assertEqual(res.errors[0].message, "must be an array, but schema defines items.")
        res = validate_document(schema, [])
        self.assertEqual(res.errors[0].message, "must be an object, but schema defines properties.")

    def test_single_error_per_call(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "a": {"type": "array", "items": {"properties": {"b": "string"}}},
                "c": "boolean",
            },
        }
        res = validate_document(schema, {"a": [{"b": 1}], "c": "no"})
        self.assertEqual(_paths(res), ["$.a[0].b"])


class FailOpenTests(unittest.TestCase):
    def test_unrecognized_shapes_pass(self) -> None:
        self.assertTrue(validate_document(5, "anything").is_valid)
        self.assertTrue(validate_document({"description": "x"}, 1).is_valid)
        self.assertTrue(validate_document({"type": 5}, "x").is_valid)
        self.assertTrue(validate_document({"type": "array", "items": 7}, [1, 2]).is_valid)
        self.assertTrue(validate_document({"properties": 7}, {"a": 1}).is_valid)


class DiagnosticsTests(unittest.TestCase):
    def test_messages_can_be_disabled(self) -> None:
        res = validate_document({"type": "string"}, 5, ValidatorOptions(messages=False))
        self.assertIsNone(res.errors[0].message)
        self.assertNotIn("message", res.errors[0].to_json_obj())
        self.assertEqual(res.format_errors(), ["$: type"])

    def test_verbose_fields(self) -> None:
        schema = {"type": "object", "properties": {"a": {"type": "number"}}}
        res = validate_document(schema, {"a": "x"}, ValidatorOptions(verbose=True))
        obj = res.errors[0].to_json_obj()
        self.assertEqual(obj["schema"], "number")
        self.assertEqual(obj["parentSchema"], {"type": "number"})
        self.assertEqual(obj["data"], "x")

    def test_default_records_are_compact(self) -> None:
        obj = validate_document({"type": "string"}, 5).errors[0].to_json_obj()
        self.assertEqual(
            obj,
            {
                "keyword": "type",
                "instancePath": "$",
                "schemaPath": "#/type",
                "params": {"type": "string"},
                "message": "must be string, but it was number",
            },
        )


if __name__ == "__main__":
    unittest.main()
