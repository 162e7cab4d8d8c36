"""Validators for keywords that apply to every instance type."""

from typing import Any

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.model.json_utils import json_equals
from schemagraph.model.keyword_values import TypeKeyword
from schemagraph.validation.base import InstanceNode, KeywordValidator, SchemaValidator
from schemagraph.validation.report import ValidationError, ValidationErrorCode, ValidationReport


def _type_names(keyword: TypeKeyword) -> list[str]:
    return sorted(schema_type.value for schema_type in keyword.types)


class TypeValidator(KeywordValidator):
    """``type``: the instance must have one of the listed types."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, value: TypeKeyword) -> None:
        super().__init__(keyword, schema_location)
        self.value = value

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a type mismatch."""
        if not self.value.accepts(node.value):
            self.fail(node, report, "expected type {} but found {}", _type_names(self.value), node.instance_type.value)


class DisallowValidator(TypeValidator):
    """Draft 3 ``disallow``: the negation of ``type``."""

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report an instance matching a disallowed type."""
        if self.value.accepts(node.value):
            self.fail(node, report, "type {} is disallowed", node.instance_type.value)


class EnumValidator(KeywordValidator):
    """``enum``: the instance must equal one of the listed values."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, values: tuple[Any, ...]) -> None:
        super().__init__(keyword, schema_location)
        self.values = values

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a value outside the enumeration."""
        if not any(json_equals(node.value, value) for value in self.values):
            self.fail(node, report, "{} is not one of {}", node.value, list(self.values))


class ConstValidator(KeywordValidator):
    """``const``: the instance must equal the single given value."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, value: Any) -> None:
        super().__init__(keyword, schema_location)
        self.value = value

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a value different from the constant."""
        if not json_equals(node.value, self.value):
            self.fail(node, report, "{} does not equal the constant {}", node.value, self.value)


class CombinatorValidator(KeywordValidator):
    """Base of keywords holding a list of compiled subschemas."""

    def __init__(
        self, keyword: KeywordMetadata, schema_location: str, subschemas: list[SchemaValidator]
    ) -> None:
        super().__init__(keyword, schema_location)
        self.subschemas = tuple(subschemas)


class AllOfValidator(CombinatorValidator):
    """``allOf``, and draft 3 ``extends``: every subschema must pass."""

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Run every subschema; failures become causes of one error."""
        child = report.create_child_report()
        failed = sum(1 for subschema in self.subschemas if not subschema.validate_node(node, child))
        if failed:
            self.fail_with(
                node, report, child, "{} of {} subschemas failed", failed, len(self.subschemas)
            )


class AnyOfValidator(CombinatorValidator):
    """``anyOf``: stops at the first passing subschema."""

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Pass on the first matching subschema, else keep all causes."""
        child = report.create_child_report()
        for subschema in self.subschemas:
            if subschema.validate_node(node, child):
                return
        self.fail_with(node, report, child, "no subschema matched out of {}", len(self.subschemas))


class OneOfValidator(CombinatorValidator):
    """``oneOf``: exactly one subschema must pass."""

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Count matches; zero keeps causes, more than one is a leaf error."""
        child = report.create_child_report()
        matched = sum(1 for subschema in self.subschemas if subschema.validate_node(node, child))
        if matched == 1:
            return
        if matched == 0:
            self.fail_with(node, report, child, "{} subschemas matched, expected exactly one", matched)
        else:
            self.fail(node, report, "{} subschemas matched, expected exactly one", matched)


class NotValidator(KeywordValidator):
    """``not``: the subschema must fail."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, subschema: SchemaValidator) -> None:
        super().__init__(keyword, schema_location)
        self.subschema = subschema

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report an instance the subschema accepts."""
        if self.subschema.validate_node(node, report.create_child_report()):
            self.fail(node, report, "must not match the schema")


class ReferenceValidator(KeywordValidator):
    """``$ref``: delegates to the compiled target.

    Re-entering the same target for the same instance node while it is being
    evaluated passes vacuously; only schemas that recurse without consuming
    the instance (``{"$ref": "#"}``) hit this.
    """

    def __init__(self, keyword: KeywordMetadata, schema_location: str, target: SchemaValidator) -> None:
        super().__init__(keyword, schema_location)
        self.target = target

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Validate against the target unless already evaluating it here."""
        subject = (id(self.target), id(node.value), node.pointer)
        if subject in report.active:
            return
        report.active.add(subject)
        try:
            self.target.validate_node(node, report)
        finally:
            report.active.discard(subject)


class FalseSchemaValidator(KeywordValidator):
    """The ``false`` schema: every instance fails."""

    def __init__(self, schema_location: str) -> None:
        super().__init__(None, schema_location)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Always report an error."""
        report.add_error(
            ValidationError(
                pointer=node.pointer,
                schema_location=self.schema_location,
                keyword=None,
                code=ValidationErrorCode.SCHEMA_FALSE,
                message="no value is allowed here",
            )
        )
