"""Schema data model: locations, keyword values and immutable schema nodes."""

from schemagraph.model.json_utils import JsonPointer, JsonPointerError
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
from schemagraph.model.location import SchemaLocation
from schemagraph.model.schema import (
    FALSE_SCHEMA,
    TRUE_SCHEMA,
    KeywordConflictError,
    Schema,
    SchemaBuilder,
    SchemaHandle,
    UnresolvedReferenceError,
)

__all__ = [
    "FALSE_SCHEMA",
    "TRUE_SCHEMA",
    "BooleanKeyword",
    "DependenciesKeyword",
    "ItemsKeyword",
    "JsonArrayKeyword",
    "JsonPointer",
    "JsonPointerError",
    "JsonValueKeyword",
    "KeywordConflictError",
    "LimitKeyword",
    "NumberKeyword",
    "ReferenceKeyword",
    "Schema",
    "SchemaBuilder",
    "SchemaHandle",
    "SchemaKeyword",
    "SchemaListKeyword",
    "SchemaLocation",
    "SchemaMapKeyword",
    "SingleSchemaKeyword",
    "StringKeyword",
    "StringSetKeyword",
    "TypeKeyword",
    "UnresolvedReferenceError",
]
