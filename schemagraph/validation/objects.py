"""Validators for object keywords.

Property routing follows the drafts: a member is checked against its
``properties`` entry, then against every matching ``patternProperties``
entry; only members matched by neither reach ``additionalProperties``.
"""

import re

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.keywords.registry import Keywords
from schemagraph.validation.base import InstanceNode, KeywordValidator, SchemaValidator
from schemagraph.validation.report import ValidationReport


class PropertiesValidator(KeywordValidator):
    """``properties``; also enforces draft 3 ``"required": true`` on members."""

    def __init__(
        self,
        keyword: KeywordMetadata,
        schema_location: str,
        properties: dict[str, SchemaValidator],
        required: dict[str, str],
    ) -> None:
        """Initialize properties validator.

        Args:
            keyword: The ``properties`` keyword
            schema_location: URI of the keyword
            properties: Member name -> compiled subschema
            required: Draft 3 required member name -> location of its flag
        """
        super().__init__(keyword, schema_location)
        self.properties = properties
        self.required = required

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        instance = node.value
        for name, subschema in self.properties.items():
            if name in instance:
                subschema.validate_node(node.child(name, instance[name]), report)
            elif name in self.required:
                report.error(
                    node.pointer,
                    self.required[name],
                    Keywords.REQUIRED.key,
                    "required key [{}] not found",
                    name,
                )


class PatternPropertiesValidator(KeywordValidator):
    def __init__(
        self, keyword: KeywordMetadata, schema_location: str, patterns: dict[str, SchemaValidator]
    ) -> None:
        super().__init__(keyword, schema_location)
        self.patterns = tuple((re.compile(pattern), subschema) for pattern, subschema in patterns.items())

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        for name, value in node.value.items():
            for regex, subschema in self.patterns:
                if regex.search(name) is not None:
                    subschema.validate_node(node.child(name, value), report)


class AdditionalPropertiesValidator(KeywordValidator):
    """Members matched by neither ``properties`` nor ``patternProperties``.

    With ``false``, each such member is a leaf error at the member's pointer.
    """

    def __init__(
        self,
        keyword: KeywordMetadata,
        schema_location: str,
        subschema: SchemaValidator,
        forbid: bool,
        declared: frozenset[str],
        patterns: list[str],
    ) -> None:
        super().__init__(keyword, schema_location)
        self.subschema = subschema
        self.forbid = forbid
        self.declared = declared
        self.patterns = tuple(re.compile(pattern) for pattern in patterns)

    def _is_additional(self, name: str) -> bool:
        if name in self.declared:
            return False
        return not any(regex.search(name) for regex in self.patterns)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        for name, value in node.value.items():
            if not self._is_additional(name):
                continue
            member = node.child(name, value)
            if self.forbid:
                self.fail(member, report, "extraneous key [{}] is not permitted", name)
            else:
                self.subschema.validate_node(member, report)


class RequiredValidator(KeywordValidator):
    """``required`` (array form): one leaf error listing every missing name."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, names: tuple[str, ...]) -> None:
        super().__init__(keyword, schema_location)
        self.names = names

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        missing = [name for name in self.names if name not in node.value]
        if len(missing) == 1:
            self.fail(node, report, "required key [{}] not found", missing[0])
        elif missing:
            self.fail(node, report, "required keys {} not found", missing)


class MinPropertiesValidator(KeywordValidator):
    def __init__(self, keyword: KeywordMetadata, schema_location: str, count: int) -> None:
        super().__init__(keyword, schema_location)
        self.count = int(count)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        if len(node.value) < self.count:
            self.fail(node, report, "minimum size: [{}], found: [{}]", self.count, len(node.value))


class MaxPropertiesValidator(KeywordValidator):
    def __init__(self, keyword: KeywordMetadata, schema_location: str, count: int) -> None:
        super().__init__(keyword, schema_location)
        self.count = int(count)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        if len(node.value) > self.count:
            self.fail(node, report, "maximum size: [{}], found: [{}]", self.count, len(node.value))


class PropertyNamesValidator(KeywordValidator):
    """``propertyNames``: every member name, as a string instance, must pass."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, subschema: SchemaValidator) -> None:
        super().__init__(keyword, schema_location)
        self.subschema = subschema

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        child = report.create_child_report()
        for name in node.value:
            self.subschema.validate_node(node.child(name, name), child)
        if not child.is_valid:
            self.fail_with(node, report, child, "{} property name(s) are invalid", len(child))


class DependenciesValidator(KeywordValidator):
    """``dependencies``: property dependencies and schema dependencies."""

    def __init__(
        self,
        keyword: KeywordMetadata,
        schema_location: str,
        property_dependencies: dict[str, tuple[str, ...]],
        schema_dependencies: dict[str, SchemaValidator],
    ) -> None:
        super().__init__(keyword, schema_location)
        self.property_dependencies = property_dependencies
        self.schema_dependencies = schema_dependencies

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        instance = node.value
        for name, required in self.property_dependencies.items():
            if name not in instance:
                continue
            missing = [dependency for dependency in required if dependency not in instance]
            if missing:
                self.fail(node, report, "property [{}] requires {}", name, missing)
        for name, subschema in self.schema_dependencies.items():
            if name in instance:
                subschema.validate_node(node, report)
