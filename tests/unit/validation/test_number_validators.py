"""multipleOf/divisibleBy and minimum/maximum across drafts."""

from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import pytest

from schemagraph.loading.loader import SchemaLoader
from schemagraph.validation.report import ValidationErrorCode
from schemagraph.validation.schema_validator import JsonSchemaValidator

URI = "https://example.com/schema.json"
DRAFT3 = "http://json-schema.org/draft-03/schema#"
DRAFT4 = "http://json-schema.org/draft-04/schema#"


def _validator(document: Any) -> JsonSchemaValidator:
    schema = SchemaLoader(document_client=Mock()).read_schema(document, base_uri=URI)
    return JsonSchemaValidator(schema)


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestMultipleOf:
    """Remainders are computed on exact decimal values."""

    @pytest.mark.parametrize("value", [0.3, 0.07, 19.99, 5, Decimal("0.3")])
    def test_decimal_multiples_accepted(self, value: Any) -> None:
        assert _validator({"type": "number", "multipleOf": 0.01}).is_valid(value)

    def test_non_multiple_rejected(self) -> None:
        report = _validator({"multipleOf": 0.01}).validate(0.001)

        assert report.top_error.code is ValidationErrorCode.MULTIPLE_OF
        assert report.top_error.formatted_message == "0.001 is not a multiple of 0.01"

    def test_tenths(self) -> None:
        validator = _validator({"multipleOf": 0.1})

        assert validator.is_valid(0.3)
        assert not validator.is_valid(0.35)

    def test_integers(self) -> None:
        validator = _validator({"multipleOf": 3})

        assert validator.is_valid(9.0)
        assert not validator.is_valid(7.5)

    def test_infinity_is_not_a_multiple(self) -> None:
        assert not _validator({"multipleOf": 1}).is_valid(float("inf"))

    def test_draft3_divisible_by(self) -> None:
        report = _validator({"$schema": DRAFT3, "divisibleBy": 4}).validate(6)

        assert report.top_error.code is ValidationErrorCode.DIVISIBLE_BY


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestLimits:
    def test_inclusive_minimum(self) -> None:
        validator = _validator({"minimum": 5})

        assert validator.is_valid(5)
        assert validator.validate(4).top_error.formatted_message == "4 is less than the minimum 5"

    def test_inclusive_maximum(self) -> None:
        validator = _validator({"maximum": 5})

        assert validator.is_valid(5)
        assert validator.validate(5.5).top_error.formatted_message == "5.5 is greater than the maximum 5"

    def test_draft4_boolean_exclusive_minimum(self) -> None:
        validator = _validator({"$schema": DRAFT4, "minimum": 5, "exclusiveMinimum": True})

        error = validator.validate(5).top_error

        assert validator.is_valid(5.01)
        assert error.keyword == "minimum"
        assert error.formatted_message == "5 is less than or equal to the exclusive minimum 5"

    def test_draft6_numeric_exclusive_maximum(self) -> None:
        validator = _validator({"exclusiveMaximum": 10})

        assert validator.is_valid(9.99)
        assert (
            validator.validate(10).top_error.formatted_message
            == "10 is greater than or equal to the exclusive maximum 10"
        )

    def test_draft6_both_bounds(self) -> None:
        validator = _validator({"minimum": 0, "exclusiveMinimum": 2})

        assert validator.is_valid(3)
        assert not validator.is_valid(2)
        assert not validator.is_valid(-1)

    def test_other_types_pass(self) -> None:
        validator = _validator({"minimum": 5, "multipleOf": 2})

        assert validator.is_valid("abc")
        assert validator.is_valid(True)
        assert validator.is_valid(None)
