"""SchemaKeyword: the typed, immutable value of one keyword in a Schema.

Every value class compares and hashes structurally through ``_identity()``.
JSON literals compare with JSON semantics (see ``json_utils.freeze``).
``ReferenceKeyword`` compares on its ``$ref`` text only, which keeps equality
finite on cyclic graphs.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from schemagraph.keywords.metadata import JsonSchemaType, KeywordKind
from schemagraph.model.json_utils import freeze, instance_type_of

if TYPE_CHECKING:
    from schemagraph.model.schema import Schema, SchemaHandle

Number = int | float | Decimal


class SchemaKeyword:
    """Base of every keyword value."""

    kind: KeywordKind

    def _identity(self) -> Any:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identity()))


@dataclass(frozen=True, eq=False)
class StringKeyword(SchemaKeyword):
    kind = KeywordKind.STRING

    value: str

    def _identity(self) -> Any:
        return self.value


@dataclass(frozen=True, eq=False)
class NumberKeyword(SchemaKeyword):
    kind = KeywordKind.NUMBER

    value: Number

    def _identity(self) -> Any:
        return freeze(self.value)


@dataclass(frozen=True, eq=False)
class BooleanKeyword(SchemaKeyword):
    kind = KeywordKind.BOOLEAN

    value: bool

    def _identity(self) -> Any:
        return self.value


@dataclass(frozen=True, eq=False)
class StringSetKeyword(SchemaKeyword):
    """Set of strings (``required``); order is kept for reporting only."""

    kind = KeywordKind.STRING_SET

    values: tuple[str, ...]

    def _identity(self) -> Any:
        return frozenset(self.values)


@dataclass(frozen=True, eq=False)
class JsonArrayKeyword(SchemaKeyword):
    kind = KeywordKind.JSON_ARRAY

    values: tuple[Any, ...]

    def _identity(self) -> Any:
        return tuple(freeze(value) for value in self.values)


@dataclass(frozen=True, eq=False)
class JsonValueKeyword(SchemaKeyword):
    kind = KeywordKind.JSON_VALUE

    value: Any

    def _identity(self) -> Any:
        return freeze(self.value)


@dataclass(frozen=True, eq=False)
class SingleSchemaKeyword(SchemaKeyword):
    kind = KeywordKind.SCHEMA

    schema: "Schema"

    def _identity(self) -> Any:
        return self.schema


@dataclass(frozen=True, eq=False)
class SchemaListKeyword(SchemaKeyword):
    kind = KeywordKind.SCHEMA_LIST

    schemas: tuple["Schema", ...]

    def _identity(self) -> Any:
        return self.schemas


@dataclass(frozen=True, eq=False)
class SchemaMapKeyword(SchemaKeyword):
    """Name -> schema (``properties``, ``patternProperties``, ``definitions``)."""

    kind = KeywordKind.SCHEMA_MAP

    schemas: Mapping[str, "Schema"]

    def __post_init__(self) -> None:
        object.__setattr__(self, "schemas", MappingProxyType(dict(self.schemas)))

    def _identity(self) -> Any:
        return frozenset(self.schemas.items())


@dataclass(frozen=True, eq=False)
class TypeKeyword(SchemaKeyword):
    """Allowed instance types; ``number`` also admits integers."""

    kind = KeywordKind.TYPE

    types: frozenset[JsonSchemaType]

    def _identity(self) -> Any:
        return self.types

    def accepts(self, value: Any) -> bool:
        instance_type = instance_type_of(value)
        if instance_type in self.types:
            return True
        return instance_type is JsonSchemaType.INTEGER and JsonSchemaType.NUMBER in self.types


@dataclass(frozen=True, eq=False)
class LimitKeyword(SchemaKeyword):
    """Numeric bound shared by ``minimum`` and ``maximum``.

    Attributes:
        limit: The inclusive bound, or exclusive when ``exclusive`` is set
            (drafts 3/4 boolean ``exclusiveMinimum``/``exclusiveMaximum``)
        exclusive: Whether ``limit`` is exclusive
        exclusive_limit: Standalone exclusive bound (draft 6 numeric
            ``exclusiveMinimum``/``exclusiveMaximum``)
    """

    kind = KeywordKind.LIMIT

    limit: Number | None = None
    exclusive: bool = False
    exclusive_limit: Number | None = None

    def __post_init__(self) -> None:
        if self.limit is None and self.exclusive_limit is None:
            raise ValueError("A limit needs a bound or an exclusive bound")
        if self.exclusive and self.limit is None:
            raise ValueError("An exclusive flag needs a bound")

    def _identity(self) -> Any:
        return (
            None if self.limit is None else freeze(self.limit),
            self.exclusive,
            None if self.exclusive_limit is None else freeze(self.exclusive_limit),
        )

    def lower_violation(self, value: Number) -> tuple[Number, bool] | None:
        """The (bound, exclusive) pair ``value`` falls below, if any."""
        if self.limit is not None:
            if value < self.limit or (self.exclusive and value == self.limit):
                return self.limit, self.exclusive
        if self.exclusive_limit is not None and value <= self.exclusive_limit:
            return self.exclusive_limit, True
        return None

    def upper_violation(self, value: Number) -> tuple[Number, bool] | None:
        """The (bound, exclusive) pair ``value`` exceeds, if any."""
        if self.limit is not None:
            if value > self.limit or (self.exclusive and value == self.limit):
                return self.limit, self.exclusive
        if self.exclusive_limit is not None and value >= self.exclusive_limit:
            return self.exclusive_limit, True
        return None


@dataclass(frozen=True, eq=False)
class ItemsKeyword(SchemaKeyword):
    """``items`` merged with ``additionalItems``.

    List mode: ``all_items`` applies to every element. Tuple mode:
    ``index_schemas[i]`` applies to element ``i`` and ``additional_items``
    (None: anything allowed) to the rest.

    Raises:
        ValueError: If both list and tuple mode are given
    """

    kind = KeywordKind.ITEMS

    all_items: "Schema | None" = None
    index_schemas: tuple["Schema", ...] | None = None
    additional_items: "Schema | None" = None

    def __post_init__(self) -> None:
        if self.all_items is not None and self.index_schemas is not None:
            raise ValueError("'items' cannot be both a schema and an array of schemas")

    @property
    def is_tuple(self) -> bool:
        return self.index_schemas is not None

    def _identity(self) -> Any:
        return (self.all_items, self.index_schemas, self.additional_items)


@dataclass(frozen=True, eq=False)
class DependenciesKeyword(SchemaKeyword):
    """Property dependencies (name -> required names) and schema dependencies."""

    kind = KeywordKind.DEPENDENCIES

    property_dependencies: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    schema_dependencies: Mapping[str, "Schema"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        overlap = set(self.property_dependencies) & set(self.schema_dependencies)
        if overlap:
            raise ValueError(f"Dependencies declared twice: {sorted(overlap)}")
        object.__setattr__(self, "property_dependencies", MappingProxyType(dict(self.property_dependencies)))
        object.__setattr__(self, "schema_dependencies", MappingProxyType(dict(self.schema_dependencies)))

    def _identity(self) -> Any:
        return (
            frozenset((name, frozenset(names)) for name, names in self.property_dependencies.items()),
            frozenset(self.schema_dependencies.items()),
        )


@dataclass(frozen=True, eq=False)
class ReferenceKeyword(SchemaKeyword):
    """A ``$ref``: its text, resolved URI and the handle of its target."""

    kind = KeywordKind.REFERENCE

    ref: str
    absolute_uri: str
    handle: "SchemaHandle"

    def _identity(self) -> Any:
        return self.ref

    @property
    def schema(self) -> "Schema":
        """The target schema.

        Raises:
            UnresolvedReferenceError: If the target has not been loaded
        """
        return self.handle.schema


KEYWORD_VALUE_TYPES: dict[KeywordKind, type[SchemaKeyword]] = {
    cls.kind: cls
    for cls in (
        StringKeyword,
        NumberKeyword,
        BooleanKeyword,
        StringSetKeyword,
        JsonArrayKeyword,
        JsonValueKeyword,
        SingleSchemaKeyword,
        SchemaListKeyword,
        SchemaMapKeyword,
        TypeKeyword,
        LimitKeyword,
        ItemsKeyword,
        DependenciesKeyword,
        ReferenceKeyword,
    )
}
