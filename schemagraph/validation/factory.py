"""ValidatorFactory: compiles a schema graph into a SchemaValidator tree, once."""

import logging
from collections.abc import Callable

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.keywords.registry import Keywords
from schemagraph.model.keyword_values import (
    BooleanKeyword,
    DependenciesKeyword,
    ItemsKeyword,
    JsonArrayKeyword,
    JsonValueKeyword,
    LimitKeyword,
    NumberKeyword,
    ReferenceKeyword,
    SchemaKeyword,
    SchemaListKeyword,
    SchemaMapKeyword,
    SingleSchemaKeyword,
    StringKeyword,
    StringSetKeyword,
    TypeKeyword,
)
from schemagraph.model.schema import FALSE_SCHEMA, TRUE_SCHEMA, Schema
from schemagraph.validation.arrays import (
    ContainsValidator,
    ItemsValidator,
    MaxItemsValidator,
    MinItemsValidator,
    UniqueItemsValidator,
)
from schemagraph.validation.base import KeywordValidator, SchemaValidator
from schemagraph.validation.common import (
    AllOfValidator,
    AnyOfValidator,
    ConstValidator,
    DisallowValidator,
    EnumValidator,
    FalseSchemaValidator,
    NotValidator,
    OneOfValidator,
    ReferenceValidator,
    TypeValidator,
)
from schemagraph.validation.formats import FormatRegistry
from schemagraph.validation.numbers import MaximumValidator, MinimumValidator, MultipleOfValidator
from schemagraph.validation.objects import (
    AdditionalPropertiesValidator,
    DependenciesValidator,
    MaxPropertiesValidator,
    MinPropertiesValidator,
    PatternPropertiesValidator,
    PropertiesValidator,
    PropertyNamesValidator,
    RequiredValidator,
)
from schemagraph.validation.report import join_location
from schemagraph.validation.strings import (
    FormatValidator,
    MaxLengthValidator,
    MinLengthValidator,
    PatternValidator,
)

logger = logging.getLogger(__name__)

KeywordCompiler = Callable[[Schema, KeywordMetadata, SchemaKeyword, str], KeywordValidator | None]


class ValidatorFactory:
    """Compiles schemas into validator trees.

    Each schema object is compiled once per factory: an empty
    ``SchemaValidator`` is registered before its keywords compile, so
    ``$ref`` cycles resolve to the validator being built. Keywords without a
    validator (annotations, ``definitions``, custom keywords) are skipped.
    """

    def __init__(self, formats: FormatRegistry | None = None) -> None:
        """Initialize validator factory.

        Args:
            formats: Format predicates; defaults to ``FormatRegistry.default()``
        """
        self.formats = formats if formats is not None else FormatRegistry.default()
        # Storage: {id(schema): (schema, validator)}; the schema is kept alive
        # so its id cannot be reused.
        self._compiled: dict[int, tuple[Schema, SchemaValidator]] = {}
        self._compilers: dict[str, KeywordCompiler] = {
            Keywords.TYPE.key: self._type,
            Keywords.DISALLOW.key: self._disallow,
            Keywords.ENUM.key: self._enum,
            Keywords.CONST.key: self._const,
            Keywords.ALL_OF.key: self._all_of,
            Keywords.EXTENDS.key: self._all_of,
            Keywords.ANY_OF.key: self._any_of,
            Keywords.ONE_OF.key: self._one_of,
            Keywords.NOT.key: self._not,
            Keywords.REF.key: self._reference,
            Keywords.FORMAT.key: self._format,
            Keywords.MULTIPLE_OF.key: self._multiple_of,
            Keywords.DIVISIBLE_BY.key: self._multiple_of,
            Keywords.MINIMUM.key: self._minimum,
            Keywords.MAXIMUM.key: self._maximum,
            Keywords.MIN_LENGTH.key: self._min_length,
            Keywords.MAX_LENGTH.key: self._max_length,
            Keywords.PATTERN.key: self._pattern,
            Keywords.ITEMS.key: self._items,
            Keywords.MIN_ITEMS.key: self._min_items,
            Keywords.MAX_ITEMS.key: self._max_items,
            Keywords.UNIQUE_ITEMS.key: self._unique_items,
            Keywords.CONTAINS.key: self._contains,
            Keywords.PROPERTIES.key: self._properties,
            Keywords.PATTERN_PROPERTIES.key: self._pattern_properties,
            Keywords.ADDITIONAL_PROPERTIES.key: self._additional_properties,
            Keywords.REQUIRED.key: self._required,
            Keywords.MIN_PROPERTIES.key: self._min_properties,
            Keywords.MAX_PROPERTIES.key: self._max_properties,
            Keywords.PROPERTY_NAMES.key: self._property_names,
            Keywords.DEPENDENCIES.key: self._dependencies,
        }

    def compile(self, schema: Schema) -> SchemaValidator:
        """Compile ``schema`` (and everything it reaches) into a validator.

        Args:
            schema: Root of a loaded or built schema graph

        Returns:
            The compiled validator; reusable and safe to share
        """
        return self._compile(schema, "#")

    def _compile(self, schema: Schema, fallback_location: str) -> SchemaValidator:
        # The boolean singletons appear in many places; compile them per use
        # so errors carry the location they were used at.
        shared = schema is not TRUE_SCHEMA and schema is not FALSE_SCHEMA
        if shared:
            cached = self._compiled.get(id(schema))
            if cached is not None:
                return cached[1]

        location = schema.location.absolute_uri if schema.location is not None else fallback_location
        validator = SchemaValidator(location)
        if shared:
            self._compiled[id(schema)] = (schema, validator)

        if schema.is_always_invalid:
            validator.fill([FalseSchemaValidator(location)])
            return validator

        keyword_validators = []
        for metadata, value in schema.keywords.items():
            compiler = self._compilers.get(metadata.key)
            if compiler is None:
                continue
            keyword_validator = compiler(schema, metadata, value, join_location(location, metadata.key))
            if keyword_validator is not None:
                keyword_validators.append(keyword_validator)
        validator.fill(keyword_validators)
        logger.debug(f"Compiled {len(keyword_validators)} keyword validators for {location}")
        return validator

    def _compile_list(self, schemas: tuple[Schema, ...], location: str) -> list[SchemaValidator]:
        return [self._compile(schema, join_location(location, position)) for position, schema in enumerate(schemas)]

    def _compile_map(self, schemas: dict[str, Schema], location: str) -> dict[str, SchemaValidator]:
        return {name: self._compile(schema, join_location(location, name)) for name, schema in schemas.items()}

    # Keywords for every instance type

    def _type(self, schema: Schema, metadata: KeywordMetadata, value: TypeKeyword, location: str):
        return TypeValidator(metadata, location, value)

    def _disallow(self, schema: Schema, metadata: KeywordMetadata, value: TypeKeyword, location: str):
        return DisallowValidator(metadata, location, value)

    def _enum(self, schema: Schema, metadata: KeywordMetadata, value: JsonArrayKeyword, location: str):
        return EnumValidator(metadata, location, value.values)

    def _const(self, schema: Schema, metadata: KeywordMetadata, value: JsonValueKeyword, location: str):
        return ConstValidator(metadata, location, value.value)

    def _all_of(self, schema: Schema, metadata: KeywordMetadata, value: SchemaListKeyword, location: str):
        return AllOfValidator(metadata, location, self._compile_list(value.schemas, location))

    def _any_of(self, schema: Schema, metadata: KeywordMetadata, value: SchemaListKeyword, location: str):
        return AnyOfValidator(metadata, location, self._compile_list(value.schemas, location))

    def _one_of(self, schema: Schema, metadata: KeywordMetadata, value: SchemaListKeyword, location: str):
        return OneOfValidator(metadata, location, self._compile_list(value.schemas, location))

    def _not(self, schema: Schema, metadata: KeywordMetadata, value: SingleSchemaKeyword, location: str):
        return NotValidator(metadata, location, self._compile(value.schema, location))

    def _reference(self, schema: Schema, metadata: KeywordMetadata, value: ReferenceKeyword, location: str):
        return ReferenceValidator(metadata, location, self._compile(value.schema, value.absolute_uri))

    # Numbers

    def _multiple_of(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MultipleOfValidator(metadata, location, value.value)

    def _minimum(self, schema: Schema, metadata: KeywordMetadata, value: LimitKeyword, location: str):
        return MinimumValidator(metadata, location, value)

    def _maximum(self, schema: Schema, metadata: KeywordMetadata, value: LimitKeyword, location: str):
        return MaximumValidator(metadata, location, value)

    # Strings

    def _min_length(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MinLengthValidator(metadata, location, value.value)

    def _max_length(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MaxLengthValidator(metadata, location, value.value)

    def _pattern(self, schema: Schema, metadata: KeywordMetadata, value: StringKeyword, location: str):
        return PatternValidator(metadata, location, value.value)

    def _format(self, schema: Schema, metadata: KeywordMetadata, value: StringKeyword, location: str):
        predicate = self.formats.lookup(value.value)
        if predicate is None:
            logger.debug(f"Ignoring unknown format '{value.value}' at {location}")
            return None
        return FormatValidator(metadata, location, value.value, predicate)

    # Arrays

    def _items(self, schema: Schema, metadata: KeywordMetadata, value: ItemsKeyword, location: str):
        additional_location = join_location(schema_location_of(location), Keywords.ADDITIONAL_ITEMS.key)
        additional = value.additional_items
        return ItemsValidator(
            metadata,
            location,
            all_items=self._compile(value.all_items, location) if value.all_items is not None else None,
            index_schemas=(
                self._compile_list(value.index_schemas, location) if value.index_schemas is not None else None
            ),
            additional_items=(
                self._compile(additional, additional_location)
                if additional is not None and not additional.is_always_invalid
                else None
            ),
            forbid_additional=additional is not None and additional.is_always_invalid,
            additional_location=additional_location,
        )

    def _min_items(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MinItemsValidator(metadata, location, value.value)

    def _max_items(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MaxItemsValidator(metadata, location, value.value)

    def _unique_items(self, schema: Schema, metadata: KeywordMetadata, value: BooleanKeyword, location: str):
        return UniqueItemsValidator(metadata, location) if value.value else None

    def _contains(self, schema: Schema, metadata: KeywordMetadata, value: SingleSchemaKeyword, location: str):
        return ContainsValidator(metadata, location, self._compile(value.schema, location))

    # Objects

    def _properties(self, schema: Schema, metadata: KeywordMetadata, value: SchemaMapKeyword, location: str):
        required = {}
        for name, subschema in value.schemas.items():
            flag = subschema.get(Keywords.REQUIRED)
            if isinstance(flag, BooleanKeyword) and flag.value:
                required[name] = join_location(location, name, Keywords.REQUIRED.key)
        return PropertiesValidator(metadata, location, self._compile_map(value.schemas, location), required)

    def _pattern_properties(
        self, schema: Schema, metadata: KeywordMetadata, value: SchemaMapKeyword, location: str
    ):
        return PatternPropertiesValidator(metadata, location, self._compile_map(value.schemas, location))

    def _additional_properties(
        self, schema: Schema, metadata: KeywordMetadata, value: SingleSchemaKeyword, location: str
    ):
        if value.schema.is_always_valid:
            return None
        properties = schema.get(Keywords.PROPERTIES)
        patterns = schema.get(Keywords.PATTERN_PROPERTIES)
        forbid = value.schema.is_always_invalid
        return AdditionalPropertiesValidator(
            metadata,
            location,
            subschema=self._compile(value.schema, location),
            forbid=forbid,
            declared=frozenset(properties.schemas) if isinstance(properties, SchemaMapKeyword) else frozenset(),
            patterns=list(patterns.schemas) if isinstance(patterns, SchemaMapKeyword) else [],
        )

    def _required(self, schema: Schema, metadata: KeywordMetadata, value: SchemaKeyword, location: str):
        # Draft 3 boolean "required" is enforced by the parent's "properties".
        if isinstance(value, StringSetKeyword):
            return RequiredValidator(metadata, location, value.values)
        return None

    def _min_properties(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MinPropertiesValidator(metadata, location, value.value)

    def _max_properties(self, schema: Schema, metadata: KeywordMetadata, value: NumberKeyword, location: str):
        return MaxPropertiesValidator(metadata, location, value.value)

    def _property_names(
        self, schema: Schema, metadata: KeywordMetadata, value: SingleSchemaKeyword, location: str
    ):
        return PropertyNamesValidator(metadata, location, self._compile(value.schema, location))

    def _dependencies(
        self, schema: Schema, metadata: KeywordMetadata, value: DependenciesKeyword, location: str
    ):
        return DependenciesValidator(
            metadata,
            location,
            dict(value.property_dependencies),
            self._compile_map(dict(value.schema_dependencies), location),
        )


def schema_location_of(keyword_location: str) -> str:
    """Location of the schema owning a keyword location."""
    base, _, pointer = keyword_location.partition("#")
    parent = pointer.rsplit("/", 1)[0]
    return f"{base}#{parent}"
