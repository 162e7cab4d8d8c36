"""minLength/maxLength count code points; pattern is an unanchored search."""

from typing import Any
from unittest.mock import Mock

import pytest

from schemagraph.loading.loader import SchemaLoader
from schemagraph.validation.schema_validator import JsonSchemaValidator

URI = "https://example.com/schema.json"


def _validator(document: Any) -> JsonSchemaValidator:
    schema = SchemaLoader(document_client=Mock()).read_schema(document, base_uri=URI)
    return JsonSchemaValidator(schema)


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestStringValidators:
    def test_min_length_counts_code_points(self) -> None:
        assert _validator({"minLength": 2}).is_valid("😀😀")

        report = _validator({"minLength": 3}).validate("😀😀")

        assert report.top_error.keyword == "minLength"
        assert report.top_error.formatted_message == "expected minLength 3, actual 2"

    def test_max_length(self) -> None:
        validator = _validator({"maxLength": 1})

        assert validator.is_valid("a")
        assert validator.validate("ab").top_error.formatted_message == "expected maxLength 1, actual 2"

    def test_pattern_is_unanchored(self) -> None:
        assert _validator({"pattern": "b"}).is_valid("abc")

    def test_anchored_pattern(self) -> None:
        report = _validator({"pattern": "^b"}).validate("abc")

        assert report.top_error.keyword == "pattern"
        assert report.top_error.schema_location == URI + "#/pattern"
        assert report.top_error.formatted_message == "string abc does not match pattern ^b"

    def test_non_strings_pass(self) -> None:
        validator = _validator({"minLength": 5, "pattern": "^x"})

        assert validator.is_valid(12)
        assert validator.is_valid(["a"])

    def test_string_keywords_fold_into_one_error(self) -> None:
        report = _validator({"minLength": 5, "pattern": "^x"}).validate("abc")

        assert len(report) == 1
        assert report.top_error.keyword is None
        assert report.top_error.formatted_message == "2 schema violations found"
        assert {cause.keyword for cause in report.top_error.causes} == {"minLength", "pattern"}
