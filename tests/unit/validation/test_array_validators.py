"""items/additionalItems, item counts, uniqueItems and contains."""

from typing import Any
from unittest.mock import Mock

import pytest

from schemagraph.loading.loader import SchemaLoader
from schemagraph.validation.report import ValidationErrorCode
from schemagraph.validation.schema_validator import JsonSchemaValidator

URI = "https://example.com/schema.json"

TUPLE = {"items": [{"type": "string"}, {"type": "integer"}]}


def _validator(document: Any) -> JsonSchemaValidator:
    schema = SchemaLoader(document_client=Mock()).read_schema(document, base_uri=URI)
    return JsonSchemaValidator(schema)


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.oracle_schema
class TestItems:
    """List and tuple forms of items."""

    def test_list_items_error_pointer(self) -> None:
        report = _validator({"items": {"type": "integer"}}).validate([1, "a", 3])

        assert report.top_error.pointer == "#/1"
        assert report.top_error.keyword == "type"
        assert report.top_error.schema_location == URI + "#/items/type"

    def test_list_items_several_failures(self) -> None:
        report = _validator({"items": {"type": "integer"}}).validate([1, "a", "b"])

        error = report.top_error
        assert error.code is ValidationErrorCode.SCHEMA
        assert [cause.pointer for cause in error.causes] == ["#/1", "#/2"]

    def test_tuple_allows_additional_items_by_default(self) -> None:
        assert _validator(TUPLE).is_valid(["a", 1, "extra", None])

    def test_tuple_shorter_than_schemas(self) -> None:
        assert _validator(dict(TUPLE, additionalItems=False)).is_valid(["a"])

    def test_additional_items_false_is_one_leaf(self) -> None:
        report = _validator(dict(TUPLE, additionalItems=False)).validate(["a", 1, "x", "y"])

        error = report.top_error
        assert len(report) == 1
        assert error.is_leaf
        assert error.keyword == "additionalItems"
        assert error.pointer == "#"
        assert error.schema_location == URI + "#/additionalItems"
        assert error.formatted_message == "expected at most 2 items but found 4"

    def test_additional_items_schema(self) -> None:
        report = _validator(dict(TUPLE, additionalItems={"type": "boolean"})).validate(["a", 1, True, "x"])

        assert report.top_error.pointer == "#/3"
        assert report.top_error.keyword == "type"

    def test_additional_items_ignored_in_list_mode(self) -> None:
        assert _validator({"items": {}, "additionalItems": False}).is_valid([1, 2, 3])

    def test_false_items(self) -> None:
        validator = _validator({"items": False})

        report = validator.validate([1])

        assert validator.is_valid([])
        assert report.top_error.pointer == "#/0"
        assert report.top_error.code is ValidationErrorCode.SCHEMA_FALSE


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.oracle_schema
class TestArrayConstraints:
    def test_min_items(self) -> None:
        report = _validator({"minItems": 2}).validate([1])

        assert report.top_error.formatted_message == "expected minimum item count: 2, found: 1"

    def test_max_items(self) -> None:
        report = _validator({"maxItems": 1}).validate([1, 2])

        assert report.top_error.formatted_message == "expected maximum item count: 1, found: 2"

    @pytest.mark.parametrize(
        "instance",
        [[1, 1.0], [{"a": 1, "b": 2}, {"b": 2, "a": 1}], [[1, "x"], [1, "x"]]],
    )
    def test_unique_items_uses_json_equality(self, instance: list) -> None:
        assert not _validator({"uniqueItems": True}).is_valid(instance)

    def test_unique_items_message(self) -> None:
        report = _validator({"uniqueItems": True}).validate(["a", "b", "a"])

        assert report.top_error.formatted_message == "array items at 0 and 2 are not unique"

    @pytest.mark.parametrize("instance", [[1, True], [0, False], [None, "null"], []])
    def test_unique_items_distinct(self, instance: list) -> None:
        assert _validator({"uniqueItems": True}).is_valid(instance)

    def test_unique_items_false_allows_duplicates(self) -> None:
        assert _validator({"uniqueItems": False}).is_valid([1, 1])

    def test_contains(self) -> None:
        validator = _validator({"contains": {"type": "integer"}})

        report = validator.validate(["a"])

        assert validator.is_valid(["a", 2])
        assert report.top_error.is_leaf
        assert report.top_error.keyword == "contains"
        assert not validator.is_valid([])

    def test_array_keywords_skip_other_types(self) -> None:
        assert _validator({"minItems": 3, "contains": {}}).is_valid({"not": "an array"})
