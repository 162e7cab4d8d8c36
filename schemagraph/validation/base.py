"""Compiled validator tree: SchemaValidator nodes holding KeywordValidators."""

import logging
from typing import Any

from schemagraph.keywords.metadata import JsonSchemaType, KeywordMetadata
from schemagraph.model.json_utils import escape_segment, instance_type_of
from schemagraph.validation.report import ValidationReport

logger = logging.getLogger(__name__)


class InstanceNode:
    """A value inside the instance being validated, with its pointer.

    The pointer is rendered lazily since most nodes never fail.
    """

    __slots__ = ("value", "parent", "segment", "_pointer", "_type")

    def __init__(self, value: Any, parent: "InstanceNode | None" = None, segment: str | None = None) -> None:
        self.value = value
        self.parent = parent
        self.segment = segment
        self._pointer: str | None = None
        self._type: JsonSchemaType | None = None

    def child(self, segment: str | int, value: Any) -> "InstanceNode":
        return InstanceNode(value, self, str(segment))

    @property
    def pointer(self) -> str:
        """Location in ``#/a/0`` form."""
        if self._pointer is None:
            if self.parent is None:
                self._pointer = "#"
            else:
                self._pointer = f"{self.parent.pointer}/{escape_segment(self.segment)}"
        return self._pointer

    @property
    def instance_type(self) -> JsonSchemaType:
        if self._type is None:
            self._type = instance_type_of(self.value)
        return self._type


class KeywordValidator:
    """Validates one keyword of one schema.

    Attributes:
        keyword: The keyword; None for the ``false`` schema check
        schema_location: URI of the keyword in its schema document
    """

    keyword: KeywordMetadata | None = None

    def __init__(self, keyword: KeywordMetadata | None, schema_location: str) -> None:
        self.keyword = keyword
        self.schema_location = schema_location

    @property
    def key(self) -> str:
        return self.keyword.key if self.keyword is not None else ""

    def applies_to(self, node: InstanceNode) -> bool:
        """Type-directed execution: keywords for other instance types pass vacuously."""
        return self.keyword is None or self.keyword.applies_to_type(node.instance_type)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        raise NotImplementedError

    def fail(self, node: InstanceNode, report: ValidationReport, message: str, *arguments: Any) -> None:
        report.error(node.pointer, self.schema_location, self.key, message, *arguments)

    def fail_with(
        self, node: InstanceNode, report: ValidationReport, child: ValidationReport, message: str, *arguments: Any
    ) -> None:
        report.add_report(child, node.pointer, self.schema_location, self.key, message, *arguments)


class SchemaValidator:
    """Compiled form of one schema; immutable once filled by the factory.

    The factory registers an empty validator before compiling its keywords so
    that ``$ref`` cycles resolve to the same object.
    """

    def __init__(self, schema_location: str) -> None:
        self.schema_location = schema_location
        self._validators: tuple[KeywordValidator, ...] = ()
        self._filled = False

    def fill(self, validators: list[KeywordValidator]) -> None:
        """Set the keyword validators; allowed once.

        Raises:
            ValueError: If the validator was already filled
        """
        if self._filled:
            raise ValueError(f"Validator for '{self.schema_location}' is already compiled")
        self._validators = tuple(validators)
        self._filled = True

    @property
    def validators(self) -> tuple[KeywordValidator, ...]:
        return self._validators

    def validate(self, instance: Any, report: ValidationReport | None = None) -> bool:
        """Validate an instance, adding at most one top-level error to ``report``.

        Args:
            instance: Any JSON value
            report: Report to add to; a throwaway report when None

        Returns:
            Whether the instance is valid
        """
        if report is None:
            report = ValidationReport()
        return self.validate_node(InstanceNode(instance), report)

    def validate_node(self, node: InstanceNode, report: ValidationReport) -> bool:
        """Run every applicable keyword and fold their errors into at most one."""
        child = report.create_child_report()
        for validator in self._validators:
            if validator.applies_to(node):
                validator.validate(node, child)
        return report.collect(child, node.pointer, self.schema_location)

    def __repr__(self) -> str:
        keys = ", ".join(validator.key or "false" for validator in self._validators)
        return f"SchemaValidator({self.schema_location}: {keys})"
