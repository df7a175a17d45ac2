"""
Tests for discriminator extraction from tagged-union oneOf arrays.
"""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonschema2openapi.discriminator import (DiscriminatorCandidate, DiscriminatorMappingError,
                                              discriminate, get_case, get_cases)


def tagged_case(prop, value, ref):
    constant = {"properties": {prop: {"enum": [value]}}}
    return {"if": constant, "then": {"$ref": ref}, "else": dict(constant)}


class TestGetCases(unittest.TestCase):
    """Test cases for recognising tagged unions."""

    def test_cases(self):
        json_data = {"oneOf": [
            tagged_case("PROPERTY", "CASE1", "REF1"),
            tagged_case("PROPERTY", "CASE2", "REF2"),
        ]}
        self.assertEqual(get_cases(json_data), DiscriminatorCandidate(
            property_name="PROPERTY",
            cases=["CASE1", "CASE2"],
            refs=["REF1", "REF2"],
        ))

    def test_not_cases(self):
        self.assertIsNone(get_cases({"ref": "lost somewhere in time"}))

    def test_empty_one_of(self):
        self.assertIsNone(get_cases({"oneOf": []}))
        self.assertIsNone(get_cases({"oneOf": {"a": 1}}))

    def test_different_properties(self):
        json_data = {"oneOf": [
            tagged_case("kind", "a", "REF1"),
            tagged_case("type", "b", "REF2"),
        ]}
        self.assertIsNone(get_cases(json_data))

    def test_single_bad_member_rejects_all(self):
        bad = tagged_case("kind", "b", "REF2")
        bad["then"] = {"properties": {"payload": {"$ref": "REF2"}}}
        self.assertIsNone(get_cases({"oneOf": [tagged_case("kind", "a", "REF1"), bad]}))

    def test_single_member(self):
        candidate = get_cases({"oneOf": [tagged_case("kind", "a", "REF1")]})
        self.assertEqual(candidate.mapping(), {"a": "REF1"})


class TestGetCase(unittest.TestCase):

    def test_else_must_equal_if(self):
        case = tagged_case("kind", "a", "REF1")
        case["else"] = {"properties": {"kind": {"enum": ["b"]}}}
        self.assertIsNone(get_case(case))

    def test_then_with_siblings(self):
        case = tagged_case("kind", "a", "REF1")
        case["then"] = {"$ref": "REF1", "description": "x"}
        self.assertIsNone(get_case(case))

    def test_non_singleton_enum(self):
        constant = {"properties": {"kind": {"enum": ["a", "b"]}}}
        self.assertIsNone(get_case({"if": constant, "then": {"$ref": "REF1"}, "else": constant}))

    def test_not_a_condition(self):
        self.assertIsNone(get_case({"$ref": "REF1"}))
        self.assertIsNone(get_case("REF1"))

    def test_case(self):
        self.assertEqual(get_case(tagged_case("kind", "a", "REF1")), ("kind", "a", "REF1"))


class TestDiscriminate(unittest.TestCase):
    """Test cases for the discriminator pass."""

    def test_discriminator(self):
        schema = {
            "type": "object",
            "oneOf": [
                tagged_case("version", "v1", "#/components/schemas/v1events.Event"),
                tagged_case("version", "v2", "#/components/schemas/v2events.Event"),
            ]
        }
        result = discriminate(schema)
        self.assertEqual(result, {
            "type": "object",
            "oneOf": [
                {"$ref": "#/components/schemas/v1events.Event"},
                {"$ref": "#/components/schemas/v2events.Event"},
            ],
            "discriminator": {
                "propertyName": "version",
                "mapping": {
                    "v1": "#/components/schemas/v1events.Event",
                    "v2": "#/components/schemas/v2events.Event",
                }
            }
        })
        self.assertIn("if", schema["oneOf"][0])

    def test_nested_candidate_below_failed_node(self):
        schema = {
            "oneOf": [{"type": "string"}, {"type": "integer"}],
            "properties": {
                "body": {"oneOf": [tagged_case("kind", "a", "A"), tagged_case("kind", "b", "B")]}
            }
        }
        result = discriminate(schema)
        self.assertEqual(result["oneOf"], [{"type": "string"}, {"type": "integer"}])
        self.assertEqual(result["properties"]["body"]["discriminator"],
                         {"propertyName": "kind", "mapping": {"a": "A", "b": "B"}})

    def test_inside_arrays(self):
        schema = [{"oneOf": [tagged_case("kind", "a", "A")]}]
        result = discriminate(schema)
        self.assertEqual(result[0]["oneOf"], [{"$ref": "A"}])

    def test_duplicate_cases_last_wins(self):
        schema = {"oneOf": [tagged_case("kind", "a", "A1"), tagged_case("kind", "a", "A2")]}
        with self.assertLogs("jsonschema2openapi.discriminator", level="WARNING"):
            result = discriminate(schema)
        self.assertEqual(result["oneOf"], [{"$ref": "A1"}, {"$ref": "A2"}])
        self.assertEqual(result["discriminator"]["mapping"], {"a": "A2"})

    def test_duplicate_cases_strict(self):
        schema = {"oneOf": [tagged_case("kind", "a", "A1"), tagged_case("kind", "a", "A2")]}
        with self.assertRaises(DiscriminatorMappingError):
            discriminate(schema, strict=True)

    def test_non_matching_left_alone(self):
        schema = {"oneOf": [{"if": {"required": ["a"]}, "then": {"$ref": "A"}, "else": {"required": ["a"]}}]}
        self.assertEqual(discriminate(schema), schema)


class TestDiscriminatorCandidate(unittest.TestCase):

    def test_duplicate_cases(self):
        candidate = DiscriminatorCandidate("kind", ["a", "b", "a", "a"], ["1", "2", "3", "4"])
        self.assertEqual(candidate.duplicate_cases(), ["a"])
        self.assertEqual(candidate.mapping(), {"a": "4", "b": "2"})


if __name__ == '__main__':
    unittest.main()
