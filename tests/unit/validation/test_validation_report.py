"""ValidationReport: leaf and aggregate errors, child reports and rendering."""

import pytest

from schemagraph.validation.report import (
    ValidationError,
    ValidationErrorCode,
    ValidationReport,
    join_location,
)

LOCATION = "https://example.com/schema.json"


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestValidationReport:
    """Error accumulation and folding."""

    def test_empty_report_is_valid(self) -> None:
        report = ValidationReport()

        assert report.is_valid
        assert report.top_error is None
        assert str(report) == "Instance is valid"

    def test_leaf_error(self) -> None:
        report = ValidationReport()

        error = report.error("#/a", LOCATION + "#/minimum", "minimum", "{} is less than the minimum {}", 1, 2)

        assert report.errors == [error]
        assert error.is_leaf
        assert error.code is ValidationErrorCode.MINIMUM
        assert error.formatted_message == "1 is less than the minimum 2"
        assert error.leaves() == [error]

    def test_add_report_folds_child_into_aggregate(self) -> None:
        report = ValidationReport()
        child = report.create_child_report()
        child.error("#", LOCATION + "#/anyOf/0/type", "type", "expected type {} but found {}", ["string"], "null")
        child.error("#", LOCATION + "#/anyOf/1/type", "type", "expected type {} but found {}", ["integer"], "null")

        aggregate = report.add_report(child, "#", LOCATION + "#/anyOf", "anyOf", "no subschema matched out of {}", 2)

        assert len(report) == 1
        assert aggregate.code is ValidationErrorCode.ANY_OF
        assert len(aggregate.causes) == 2
        assert [leaf.schema_location for leaf in report.leaves()] == [
            LOCATION + "#/anyOf/0/type",
            LOCATION + "#/anyOf/1/type",
        ]

    def test_collect_single_error_is_added_as_is(self) -> None:
        report = ValidationReport()
        child = report.create_child_report()
        error = child.error("#", LOCATION + "#/required", "required", "required key [{}] not found", "x")

        assert not report.collect(child, "#", LOCATION)
        assert report.top_error is error

    def test_collect_several_errors_aggregates_without_keyword(self) -> None:
        report = ValidationReport()
        child = report.create_child_report()
        child.error("#", LOCATION + "#/minLength", "minLength", "expected minLength {}, actual {}", 5, 2)
        child.error("#", LOCATION + "#/pattern", "pattern", "string {} does not match pattern {}", "bb", "^a")

        report.collect(child, "#", LOCATION)

        top = report.top_error
        assert top.keyword is None
        assert top.code is ValidationErrorCode.SCHEMA
        assert top.formatted_message == "2 schema violations found"
        assert len(top.leaves()) == 2

    def test_collect_valid_child(self) -> None:
        report = ValidationReport()

        assert report.collect(report.create_child_report(), "#", LOCATION)
        assert report.is_valid

    def test_child_reports_share_active_set(self) -> None:
        report = ValidationReport()

        assert report.create_child_report().active is report.active

    def test_rendering_lists_leaves(self) -> None:
        report = ValidationReport()
        report.error("#/a", LOCATION + "#/properties/a/type", "type", "expected type {} but found {}", ["string"], "integer")

        rendered = str(report)

        assert rendered.splitlines() == [
            "Instance is invalid: 1 violation(s)",
            "  - #/a [type]: expected type ['string'] but found integer "
            "(schema: https://example.com/schema.json#/properties/a/type)",
        ]

    def test_to_dict(self) -> None:
        error = ValidationError(
            pointer="#",
            schema_location=LOCATION,
            keyword=None,
            code=ValidationErrorCode.SCHEMA_FALSE,
            message="no value is allowed here",
        )

        assert error.to_dict() == {
            "pointer": "#",
            "schema_location": LOCATION,
            "keyword": None,
            "code": "validation.schema.false",
            "message": "no value is allowed here",
            "causes": [],
        }


@pytest.mark.unit
@pytest.mark.P1
@pytest.mark.deterministic
class TestErrorCodes:
    def test_code_per_keyword(self) -> None:
        assert ValidationErrorCode.for_keyword("additionalProperties") is ValidationErrorCode.ADDITIONAL_PROPERTIES
        assert ValidationErrorCode.for_keyword("$ref").value == "validation.keyword.$ref"

    def test_unvalidated_keyword_has_no_code(self) -> None:
        with pytest.raises(ValueError):
            ValidationErrorCode.for_keyword("title")

    def test_join_location(self) -> None:
        assert join_location(LOCATION, "properties", "a/b") == LOCATION + "#/properties/a~1b"
        assert join_location(LOCATION + "#/items", 0) == LOCATION + "#/items/0"
        assert join_location(LOCATION, "properties", "a b") == LOCATION + "#/properties/a%20b"
