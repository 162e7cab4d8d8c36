"""Validators for array keywords."""

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.keywords.registry import Keywords
from schemagraph.model.json_utils import freeze
from schemagraph.validation.base import InstanceNode, KeywordValidator, SchemaValidator
from schemagraph.validation.report import ValidationReport


class ItemsValidator(KeywordValidator):
    """``items`` with ``additionalItems``.

    List mode validates every element against ``all_items``. Tuple mode
    validates element ``i`` against ``index_schemas[i]`` and the rest against
    ``additional_items``; when that is the ``false`` schema, surplus elements
    are one ``additionalItems`` leaf error on the array.
    """

    def __init__(
        self,
        keyword: KeywordMetadata,
        schema_location: str,
        all_items: SchemaValidator | None,
        index_schemas: list[SchemaValidator] | None,
        additional_items: SchemaValidator | None,
        forbid_additional: bool,
        additional_location: str,
    ) -> None:
        super().__init__(keyword, schema_location)
        self.all_items = all_items
        self.index_schemas = tuple(index_schemas) if index_schemas is not None else None
        self.additional_items = additional_items
        self.forbid_additional = forbid_additional
        self.additional_location = additional_location

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Validate elements positionally or against one item schema."""
        elements = node.value
        if self.index_schemas is None:
            if self.all_items is not None:
                for position, element in enumerate(elements):
                    self.all_items.validate_node(node.child(position, element), report)
            return

        for position, (subschema, element) in enumerate(zip(self.index_schemas, elements)):
            subschema.validate_node(node.child(position, element), report)

        surplus = len(elements) - len(self.index_schemas)
        if surplus <= 0:
            return
        if self.forbid_additional:
            report.error(
                node.pointer,
                self.additional_location,
                Keywords.ADDITIONAL_ITEMS.key,
                "expected at most {} items but found {}",
                len(self.index_schemas),
                len(elements),
            )
        elif self.additional_items is not None:
            for position in range(len(self.index_schemas), len(elements)):
                self.additional_items.validate_node(node.child(position, elements[position]), report)


class MinItemsValidator(KeywordValidator):
    """``minItems``."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, count: int) -> None:
        super().__init__(keyword, schema_location)
        self.count = int(count)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report an array with too few elements."""
        if len(node.value) < self.count:
            self.fail(node, report, "expected minimum item count: {}, found: {}", self.count, len(node.value))


class MaxItemsValidator(KeywordValidator):
    """``maxItems``."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, count: int) -> None:
        super().__init__(keyword, schema_location)
        self.count = int(count)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report an array with too many elements."""
        if len(node.value) > self.count:
            self.fail(node, report, "expected maximum item count: {}, found: {}", self.count, len(node.value))


class UniqueItemsValidator(KeywordValidator):
    """``uniqueItems: true``, using JSON equality."""

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report the first pair of equal elements."""
        seen: dict[object, int] = {}
        for position, element in enumerate(node.value):
            key = freeze(element)
            if key in seen:
                self.fail(node, report, "array items at {} and {} are not unique", seen[key], position)
                return
            seen[key] = position


class ContainsValidator(KeywordValidator):
    """``contains``: at least one element must pass; a single leaf otherwise."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, subschema: SchemaValidator) -> None:
        super().__init__(keyword, schema_location)
        self.subschema = subschema

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report an array where no element passes."""
        for position, element in enumerate(node.value):
            if self.subschema.validate_node(node.child(position, element), report.create_child_report()):
                return
        self.fail(node, report, "expected at least one array item to match 'contains' schema")
