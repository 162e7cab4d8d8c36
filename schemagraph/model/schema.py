"""Schema graph nodes: Schema, SchemaHandle and SchemaBuilder.

A ``Schema`` is immutable once built. Cycles in the graph only pass through
``SchemaHandle`` objects held by ``ReferenceKeyword`` values, so plain object
references are enough to represent recursive schemas.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from schemagraph.keywords.metadata import JsonSchemaType, JsonSchemaVersion, KeywordMetadata
from schemagraph.keywords.registry import COUNT_KEYWORDS, Keywords
from schemagraph.model.json_utils import is_integral, is_number
from schemagraph.model.keyword_values import (
    KEYWORD_VALUE_TYPES,
    ItemsKeyword,
    SchemaKeyword,
    SchemaMapKeyword,
    SingleSchemaKeyword,
    StringSetKeyword,
    TypeKeyword,
)
from schemagraph.model.location import SchemaLocation

logger = logging.getLogger(__name__)


class UnresolvedReferenceError(LookupError):
    """Raised when dereferencing a handle that was never bound.

    Attributes:
        uri: URI of the schema the handle stands for
    """

    def __init__(self, uri: str) -> None:
        super().__init__(f"Schema '{uri}' is referenced but was never loaded")
        self.uri = uri


class KeywordConflictError(ValueError):
    """Raised when a keyword value contradicts one already in the builder.

    Attributes:
        key: The conflicting keyword
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Conflicting values for keyword '{key}': {reason}")
        self.key = key


class Schema:
    """Immutable schema node.

    Equality and hashing consider ``keywords`` only, so equal documents loaded
    at different locations produce equal schemas.

    Attributes:
        keywords: Read-only mapping of keyword metadata to keyword value
        location: Where the schema was loaded from (None for the canonical
            boolean schemas)
        version: Draft the schema was interpreted under
    """

    __slots__ = ("_keywords", "location", "version", "_hash")

    def __init__(
        self,
        keywords: Mapping[KeywordMetadata, SchemaKeyword],
        location: SchemaLocation | None = None,
        version: JsonSchemaVersion | None = None,
    ) -> None:
        self._keywords = MappingProxyType(dict(keywords))
        self.location = location
        self.version = version
        self._hash: int | None = None

    @property
    def keywords(self) -> Mapping[KeywordMetadata, SchemaKeyword]:
        return self._keywords

    def get(self, keyword: KeywordMetadata) -> SchemaKeyword | None:
        return self._keywords.get(keyword)

    def has(self, keyword: KeywordMetadata) -> bool:
        return keyword in self._keywords

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._keywords

    def __iter__(self) -> Iterator[KeywordMetadata]:
        return iter(self._keywords)

    def __len__(self) -> int:
        return len(self._keywords)

    @property
    def is_reference(self) -> bool:
        return Keywords.REF in self._keywords

    @property
    def is_always_valid(self) -> bool:
        """Whether the schema has no constraining keywords (``true``, ``{}``)."""
        return not self._keywords

    @property
    def is_always_invalid(self) -> bool:
        """Whether the schema is ``false`` (``{"not": {}}``)."""
        value = self._keywords.get(Keywords.NOT)
        return (
            len(self._keywords) == 1
            and isinstance(value, SingleSchemaKeyword)
            and value.schema.is_always_valid
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Schema):
            return NotImplemented
        return self._keywords == other._keywords

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._keywords.items()))
        return self._hash

    def __repr__(self) -> str:
        where = f" at {self.location}" if self.location is not None else ""
        return f"Schema({', '.join(k.key for k in self._keywords)}){where}"


TRUE_SCHEMA = Schema({})
FALSE_SCHEMA = Schema({Keywords.NOT: SingleSchemaKeyword(TRUE_SCHEMA)})


class SchemaHandle:
    """Placeholder for a schema whose loading has started but not finished.

    Attributes:
        location: Location of the schema the handle stands for
    """

    __slots__ = ("location", "_schema")

    def __init__(self, location: SchemaLocation) -> None:
        self.location = location
        self._schema: Schema | None = None

    @property
    def is_bound(self) -> bool:
        return self._schema is not None

    def bind(self, schema: Schema) -> None:
        """Attach the finished schema.

        Raises:
            ValueError: If the handle is already bound to another schema
        """
        if self._schema is not None and self._schema is not schema:
            raise ValueError(f"Handle for '{self.location}' is already bound")
        self._schema = schema

    @property
    def schema(self) -> Schema:
        """The bound schema.

        Raises:
            UnresolvedReferenceError: If the handle is unbound
        """
        if self._schema is None:
            raise UnresolvedReferenceError(str(self.location))
        return self._schema

    def __repr__(self) -> str:
        state = "bound" if self.is_bound else "pending"
        return f"SchemaHandle({self.location}, {state})"


class SchemaBuilder:
    """Mutable accumulator of keywords for one schema.

    Preconditions are checked as keywords are added, so a built schema never
    holds a value that would only fail at validation time.

    Example::

        schema = (
            SchemaBuilder()
            .types(JsonSchemaType.OBJECT)
            .property("id", SchemaBuilder().types(JsonSchemaType.INTEGER).build())
            .required("id")
            .build()
        )
    """

    def __init__(
        self,
        location: SchemaLocation | None = None,
        version: JsonSchemaVersion = JsonSchemaVersion.DRAFT6,
    ) -> None:
        self.location = location
        self.version = version
        self._keywords: dict[KeywordMetadata, SchemaKeyword] = {}

    def keyword(self, metadata: KeywordMetadata, value: SchemaKeyword) -> "SchemaBuilder":
        """Add or replace a keyword.

        Args:
            metadata: The keyword
            value: Its value

        Returns:
            The builder, for chaining

        Raises:
            TypeError: If ``value`` is not a keyword value
            ValueError: If ``value`` is out of range for ``metadata``
        """
        if not isinstance(value, SchemaKeyword):
            raise TypeError(f"Keyword '{metadata.key}' needs a SchemaKeyword, got {type(value).__name__}")
        _check_value(metadata, value)
        self._keywords[metadata] = value
        return self

    def has(self, metadata: KeywordMetadata) -> bool:
        return metadata in self._keywords

    def get(self, metadata: KeywordMetadata) -> SchemaKeyword | None:
        return self._keywords.get(metadata)

    def types(self, *types: JsonSchemaType) -> "SchemaBuilder":
        return self.keyword(Keywords.TYPE, TypeKeyword(frozenset(types)))

    def property(self, name: str, schema: Schema) -> "SchemaBuilder":
        """Add one entry to ``properties``."""
        current = self._keywords.get(Keywords.PROPERTIES)
        schemas = dict(current.schemas) if isinstance(current, SchemaMapKeyword) else {}
        schemas[name] = schema
        return self.keyword(Keywords.PROPERTIES, SchemaMapKeyword(schemas))

    def required(self, *names: str) -> "SchemaBuilder":
        """Add names to ``required`` (array form)."""
        current = self._keywords.get(Keywords.REQUIRED)
        existing = current.values if isinstance(current, StringSetKeyword) else ()
        merged = existing + tuple(name for name in names if name not in existing)
        return self.keyword(Keywords.REQUIRED, StringSetKeyword(merged))

    def items(
        self,
        all_items: Schema | None = None,
        index_schemas: Iterable[Schema] | None = None,
    ) -> "SchemaBuilder":
        """Set the list or tuple form of ``items``, keeping ``additionalItems``.

        Raises:
            KeywordConflictError: If the other form is already set
        """
        current = self._keywords.get(Keywords.ITEMS)
        additional = current.additional_items if isinstance(current, ItemsKeyword) else None
        index_tuple = tuple(index_schemas) if index_schemas is not None else None
        if isinstance(current, ItemsKeyword):
            if (all_items is not None and current.is_tuple) or (
                index_tuple is not None and current.all_items is not None
            ):
                raise KeywordConflictError(Keywords.ITEMS.key, "schema and array forms both given")
        try:
            value = ItemsKeyword(all_items, index_tuple, additional)
        except ValueError as e:
            raise KeywordConflictError(Keywords.ITEMS.key, str(e)) from e
        return self.keyword(Keywords.ITEMS, value)

    def additional_items(self, schema: Schema) -> "SchemaBuilder":
        current = self._keywords.get(Keywords.ITEMS)
        if isinstance(current, ItemsKeyword):
            value = ItemsKeyword(current.all_items, current.index_schemas, schema)
        else:
            value = ItemsKeyword(additional_items=schema)
        return self.keyword(Keywords.ITEMS, value)

    def build(self) -> Schema:
        """Create the immutable schema; the builder stays usable."""
        schema = Schema(self._keywords, self.location, self.version)
        logger.debug(f"Built schema with {len(self._keywords)} keywords at {self.location}")
        return schema


def _check_value(metadata: KeywordMetadata, value: SchemaKeyword) -> None:
    """Fail fast on keyword values that can never validate anything."""
    expected = KEYWORD_VALUE_TYPES.get(metadata.kind)
    allowed = {expected} | {KEYWORD_VALUE_TYPES[v.kind] for v in metadata.variants}
    if expected is not None and type(value) not in allowed:
        raise TypeError(f"Keyword '{metadata.key}' cannot hold a {type(value).__name__}")

    if metadata.key in COUNT_KEYWORDS:
        number = getattr(value, "value", None)
        if not is_number(number) or not is_integral(number) or number < 0:
            raise ValueError(f"'{metadata.key}' must be a non-negative integer, got {number!r}")
    elif metadata in (Keywords.MULTIPLE_OF, Keywords.DIVISIBLE_BY):
        number = getattr(value, "value", None)
        if not is_number(number) or number <= 0:
            raise ValueError(f"'{metadata.key}' must be strictly positive, got {number!r}")
    elif metadata == Keywords.PATTERN:
        _check_regex(metadata.key, getattr(value, "value", ""))
    elif metadata == Keywords.PATTERN_PROPERTIES and isinstance(value, SchemaMapKeyword):
        for pattern in value.schemas:
            _check_regex(metadata.key, pattern)


def _check_regex(key: str, pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"'{key}' is not a valid regular expression: {pattern!r} ({e})") from e


def boolean_schema(value: bool) -> Schema:
    """Canonical schema for a boolean schema document."""
    return TRUE_SCHEMA if value else FALSE_SCHEMA