"""Pure functions turning raw keyword values into keyword value objects.

Draft differences live here as small functions keyed by draft rather than in
per-draft loader classes. Every digester either returns a value or raises
``KeywordValueError`` carrying the loading issue code to record.
"""

from collections.abc import Callable
from typing import Any

from schemagraph.keywords.metadata import (
    JsonSchemaType,
    JsonSchemaVersion,
    KeywordKind,
    KeywordMetadata,
)
from schemagraph.loading.report import LoadingIssueCode
from schemagraph.model.json_utils import is_number
from schemagraph.model.keyword_values import (
    BooleanKeyword,
    JsonArrayKeyword,
    JsonValueKeyword,
    LimitKeyword,
    NumberKeyword,
    SchemaKeyword,
    StringKeyword,
    StringSetKeyword,
    TypeKeyword,
)

D3 = JsonSchemaVersion.DRAFT3
D4 = JsonSchemaVersion.DRAFT4


class KeywordValueError(ValueError):
    """Raised by a digester for a value it cannot accept.

    Attributes:
        key: The offending keyword
        code: Loading issue code to record
        reason: What is wrong with the value
    """

    def __init__(
        self, key: str, reason: str, code: LoadingIssueCode = LoadingIssueCode.KEYWORD_INVALID
    ) -> None:
        super().__init__(f"Invalid value for keyword '{key}': {reason}")
        self.key = key
        self.code = code
        self.reason = reason


def digest_leaf(metadata: KeywordMetadata, kind: KeywordKind, value: Any) -> SchemaKeyword:
    """Wrap a leaf value whose JSON shape was already checked.

    Args:
        metadata: The keyword
        kind: Kind resolved for the draft
        value: Raw JSON value

    Raises:
        KeywordValueError: If the kind has no leaf representation
    """
    factory = _LEAF_FACTORIES.get(kind)
    if factory is None:
        raise KeywordValueError(metadata.key, f"'{kind.value}' values are not leaf values")
    return factory(value)


_LEAF_FACTORIES: dict[KeywordKind, Callable[[Any], SchemaKeyword]] = {
    KeywordKind.STRING: StringKeyword,
    KeywordKind.NUMBER: NumberKeyword,
    KeywordKind.BOOLEAN: BooleanKeyword,
    KeywordKind.JSON_ARRAY: lambda value: JsonArrayKeyword(tuple(value)),
    KeywordKind.JSON_VALUE: JsonValueKeyword,
}


def digest_type(key: str, value: Any, version: JsonSchemaVersion) -> TypeKeyword:
    """``type``/``disallow``: a type name or an array of type names.

    Draft 3 also accepts ``any``. Schemas inside a draft 3 type array are not
    supported and reported as invalid.
    """
    names = [value] if isinstance(value, str) else list(value)
    if not names and version > D3:
        raise KeywordValueError(key, "type array must not be empty")

    types: set[JsonSchemaType] = set()
    for name in names:
        if not isinstance(name, str):
            raise KeywordValueError(key, f"type entries must be strings, got {name!r}")
        if name == "any" and version is D3:
            types.update(JsonSchemaType)
            continue
        schema_type = JsonSchemaType.from_name(name)
        if schema_type is None:
            raise KeywordValueError(key, f"unknown type '{name}'")
        if schema_type in types and version > D3:
            raise KeywordValueError(key, f"type '{name}' listed twice")
        types.add(schema_type)
    return TypeKeyword(frozenset(types))


def digest_required(key: str, value: Any, version: JsonSchemaVersion) -> SchemaKeyword:
    """``required``: boolean flag in draft 3, array of unique names afterwards."""
    if isinstance(value, bool):
        return BooleanKeyword(value)
    return StringSetKeyword(digest_names(key, value, allow_empty=version is not D4))


def digest_names(key: str, value: Any, allow_empty: bool = True) -> tuple[str, ...]:
    """An array of unique strings."""
    if not isinstance(value, list):
        raise KeywordValueError(key, f"expected an array of strings, got {value!r}")
    if not value and not allow_empty:
        raise KeywordValueError(key, "array must not be empty")
    if not all(isinstance(name, str) for name in value):
        raise KeywordValueError(key, f"array must contain only strings, got {value!r}")
    if len(set(value)) != len(value):
        raise KeywordValueError(key, f"array must not contain duplicates, got {value!r}")
    return tuple(value)


def digest_property_dependency(key: str, name: str, value: Any, version: JsonSchemaVersion) -> tuple[str, ...]:
    """Names required by a property dependency; draft 3 allows a single string."""
    if isinstance(value, str) and version is D3:
        return (value,)
    return digest_names(f"{key}/{name}", value)


def check_schema_list(key: str, value: list[Any]) -> None:
    if not value:
        raise KeywordValueError(key, "array of schemas must not be empty")


def _boolean_flag_limit(
    key: str, exclusive_key: str, bound: Any, exclusive: Any
) -> LimitKeyword | None:
    # Drafts 3 and 4: exclusiveMinimum/exclusiveMaximum are flags on the bound.
    if bound is None:
        if exclusive is not None:
            raise KeywordValueError(
                exclusive_key,
                f"'{exclusive_key}' requires '{key}'",
                LoadingIssueCode.KEYWORD_MISSING,
            )
        return None
    return LimitKeyword(limit=bound, exclusive=bool(exclusive))


def _numeric_exclusive_limit(
    key: str, exclusive_key: str, bound: Any, exclusive: Any
) -> LimitKeyword | None:
    # Draft 6: exclusiveMinimum/exclusiveMaximum are standalone numeric bounds.
    if bound is None and exclusive is None:
        return None
    return LimitKeyword(limit=bound, exclusive_limit=exclusive)


LIMIT_DIGESTERS: dict[JsonSchemaVersion, Callable[[str, str, Any, Any], LimitKeyword | None]] = {
    JsonSchemaVersion.DRAFT3: _boolean_flag_limit,
    JsonSchemaVersion.DRAFT4: _boolean_flag_limit,
    JsonSchemaVersion.DRAFT6: _numeric_exclusive_limit,
}


def digest_limit(
    key: str, exclusive_key: str, bound: Any, exclusive: Any, version: JsonSchemaVersion
) -> LimitKeyword | None:
    """Merge a bound with its exclusive companion as the draft defines them.

    Args:
        key: ``minimum`` or ``maximum``
        exclusive_key: ``exclusiveMinimum`` or ``exclusiveMaximum``
        bound: Value of ``key`` (None if absent)
        exclusive: Value of ``exclusive_key`` (None if absent)
        version: Draft of the schema

    Returns:
        The merged limit, or None if neither keyword is present

    Raises:
        KeywordValueError: ``keyword.missing`` for a draft 3/4 flag without
            its bound
    """
    if bound is not None and not is_number(bound):
        raise KeywordValueError(key, f"expected a number, got {bound!r}")
    return LIMIT_DIGESTERS[version](key, exclusive_key, bound, exclusive)
