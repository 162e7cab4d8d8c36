"""Property routing, required, counts, propertyNames and dependencies."""

from typing import Any
from unittest.mock import Mock

import pytest

from schemagraph.loading.loader import SchemaLoader
from schemagraph.validation.report import ValidationErrorCode
from schemagraph.validation.schema_validator import JsonSchemaValidator

URI = "https://example.com/schema.json"
DRAFT3 = "http://json-schema.org/draft-03/schema#"


def _validator(document: Any) -> JsonSchemaValidator:
    schema = SchemaLoader(document_client=Mock()).read_schema(document, base_uri=URI)
    return JsonSchemaValidator(schema)


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.oracle_schema
class TestPropertyRouting:
    """properties, patternProperties and additionalProperties."""

    ROUTED = {"properties": {"a": {}}, "patternProperties": {"^b": {}}, "additionalProperties": False}

    def test_declared_and_pattern_members_are_not_additional(self) -> None:
        assert _validator(self.ROUTED).is_valid({"a": 1, "bx": 2})

    def test_additional_member_is_leaf_at_member(self) -> None:
        report = _validator(self.ROUTED).validate({"a": 1, "c": 2})

        error = report.top_error
        assert error.keyword == "additionalProperties"
        assert error.pointer == "#/c"
        assert error.schema_location == URI + "#/additionalProperties"
        assert error.formatted_message == "extraneous key [c] is not permitted"

    def test_additional_properties_schema(self) -> None:
        report = _validator(
            {"properties": {"a": {}}, "additionalProperties": {"type": "integer"}}
        ).validate({"a": "x", "b": "y"})

        assert report.top_error.pointer == "#/b"
        assert report.top_error.keyword == "type"

    def test_every_matching_pattern_applies(self) -> None:
        report = _validator(
            {"patternProperties": {"^a": {"type": "string"}, "b$": {"minimum": 10}}}
        ).validate({"ab": 5})

        error = report.top_error
        assert error.code is ValidationErrorCode.SCHEMA
        assert [(cause.pointer, cause.keyword) for cause in error.causes] == [
            ("#/ab", "type"),
            ("#/ab", "minimum"),
        ]

    def test_properties_and_patterns_both_apply(self) -> None:
        report = _validator(
            {"properties": {"ab": {"type": "string"}}, "patternProperties": {"^a": {"minLength": 3}}}
        ).validate({"ab": "x"})

        assert report.top_error.keyword == "minLength"
        assert report.top_error.pointer == "#/ab"

    def test_escaped_member_pointer(self) -> None:
        report = _validator({"additionalProperties": False}).validate({"a/b": 1})

        assert report.top_error.pointer == "#/a~1b"


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.oracle_schema
class TestRequired:
    def test_missing_key_is_single_leaf(self) -> None:
        report = _validator({"type": "object", "required": ["x"]}).validate({})

        error = report.top_error
        assert len(report) == 1
        assert report.leaves() == [error]
        assert error.keyword == "required"
        assert error.pointer == "#"
        assert error.causes == ()
        assert error.schema_location == URI + "#/required"
        assert error.formatted_message == "required key [x] not found"

    def test_several_missing_keys(self) -> None:
        report = _validator({"required": ["a", "b", "c"]}).validate({"b": 1})

        assert report.top_error.formatted_message == "required keys ['a', 'c'] not found"

    def test_required_skips_non_objects(self) -> None:
        assert _validator({"required": ["a"]}).is_valid([])

    def test_draft3_required_flag(self) -> None:
        validator = _validator({"$schema": DRAFT3, "properties": {"a": {"required": True}, "b": {}}})

        report = validator.validate({"b": 1})

        assert validator.is_valid({"a": 1})
        assert report.top_error.keyword == "required"
        assert report.top_error.pointer == "#"
        assert report.top_error.schema_location == URI + "#/properties/a/required"


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.oracle_schema
class TestObjectConstraints:
    def test_min_properties(self) -> None:
        report = _validator({"minProperties": 2}).validate({"a": 1})

        assert report.top_error.formatted_message == "minimum size: [2], found: [1]"

    def test_max_properties(self) -> None:
        report = _validator({"maxProperties": 1}).validate({"a": 1, "b": 2})

        assert report.top_error.formatted_message == "maximum size: [1], found: [2]"

    def test_property_names(self) -> None:
        report = _validator({"propertyNames": {"maxLength": 3}}).validate({"ab": 1, "abcd": 2})

        error = report.top_error
        assert error.keyword == "propertyNames"
        assert error.pointer == "#"
        assert error.formatted_message == "1 property name(s) are invalid"
        assert [(cause.pointer, cause.keyword) for cause in error.causes] == [("#/abcd", "maxLength")]

    def test_false_property_names(self) -> None:
        validator = _validator({"propertyNames": False})

        assert validator.is_valid({})
        assert not validator.is_valid({"a": 1})

    def test_property_dependency(self) -> None:
        validator = _validator({"dependencies": {"a": ["b"]}})

        report = validator.validate({"a": 1})

        assert validator.is_valid({"a": 1, "b": 2})
        assert validator.is_valid({"b": 1})
        assert report.top_error.keyword == "dependencies"
        assert report.top_error.formatted_message == "property [a] requires ['b']"

    def test_schema_dependency(self) -> None:
        report = _validator({"dependencies": {"a": {"required": ["c"]}}}).validate({"a": 1})

        assert report.top_error.keyword == "required"
        assert report.top_error.formatted_message == "required key [c] not found"

    def test_draft3_string_dependency(self) -> None:
        validator = _validator({"$schema": DRAFT3, "dependencies": {"a": "b"}})

        assert not validator.is_valid({"a": 1})
        assert validator.is_valid({"a": 1, "b": 1})
