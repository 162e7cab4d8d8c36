"""KeywordRegistry: lookup table of every recognized JSON Schema keyword.

The built-in keywords of drafts 3, 4 and 6 are declared once on ``Keywords``.
A ``KeywordRegistry`` indexes them by key and answers the questions the loader
and the validator factory ask: which keyword is this key in this draft, which
keywords constrain a given instance type, and what shape does a keyword take
in a given draft.
"""

from collections.abc import Iterable

from schemagraph.keywords.metadata import (
    ALL_VERSIONS,
    ANY_SHAPE,
    JsonSchemaType,
    JsonSchemaVersion,
    JsonShape,
    KeywordKind,
    KeywordMetadata,
    KeywordVariant,
    since,
    until,
)

D3 = JsonSchemaVersion.DRAFT3
D4 = JsonSchemaVersion.DRAFT4
D6 = JsonSchemaVersion.DRAFT6

NUMERIC = frozenset({JsonSchemaType.NUMBER, JsonSchemaType.INTEGER})
STRING = frozenset({JsonSchemaType.STRING})
ARRAY = frozenset({JsonSchemaType.ARRAY})
OBJECT = frozenset({JsonSchemaType.OBJECT})

# Draft 6 accepts true/false wherever a schema is expected.
_BOOLEAN_SCHEMAS = KeywordVariant(
    versions=since(D6),
    kind=KeywordKind.SCHEMA,
    expects=frozenset({JsonShape.OBJECT, JsonShape.BOOLEAN}),
)


def _keyword(
    key: str,
    kind: KeywordKind,
    *expects: JsonShape,
    versions: frozenset[JsonSchemaVersion] = ALL_VERSIONS,
    applies_to: frozenset[JsonSchemaType] = frozenset(),
    variants: tuple[KeywordVariant, ...] = (),
    merged_into: str | None = None,
) -> KeywordMetadata:
    return KeywordMetadata(
        key=key,
        kind=kind,
        versions=versions,
        applies_to=applies_to,
        expects=frozenset(expects) if expects else ANY_SHAPE,
        variants=variants,
        merged_into=merged_into,
    )


def _schema_keyword(key: str, **kwargs) -> KeywordMetadata:
    return _keyword(key, KeywordKind.SCHEMA, JsonShape.OBJECT, variants=(_BOOLEAN_SCHEMAS,), **kwargs)


class Keywords:
    """Built-in keywords of drafts 3, 4 and 6."""

    SCHEMA = _keyword("$schema", KeywordKind.STRING, JsonShape.STRING)
    REF = _keyword("$ref", KeywordKind.REFERENCE, JsonShape.STRING)
    DOLLAR_ID = _keyword("$id", KeywordKind.STRING, JsonShape.STRING, versions=since(D6))
    ID = _keyword("id", KeywordKind.STRING, JsonShape.STRING, versions=until(D4))

    TITLE = _keyword("title", KeywordKind.STRING, JsonShape.STRING)
    DESCRIPTION = _keyword("description", KeywordKind.STRING, JsonShape.STRING)
    DEFAULT = _keyword("default", KeywordKind.JSON_VALUE)
    EXAMPLES = _keyword("examples", KeywordKind.JSON_ARRAY, JsonShape.ARRAY, versions=since(D6))
    DEFINITIONS = _keyword("definitions", KeywordKind.SCHEMA_MAP, JsonShape.OBJECT)

    TYPE = _keyword("type", KeywordKind.TYPE, JsonShape.STRING, JsonShape.ARRAY)
    DISALLOW = _keyword("disallow", KeywordKind.TYPE, JsonShape.STRING, JsonShape.ARRAY, versions=until(D3))
    ENUM = _keyword("enum", KeywordKind.JSON_ARRAY, JsonShape.ARRAY)
    CONST = _keyword("const", KeywordKind.JSON_VALUE, versions=since(D6))

    ALL_OF = _keyword("allOf", KeywordKind.SCHEMA_LIST, JsonShape.ARRAY, versions=since(D4))
    ANY_OF = _keyword("anyOf", KeywordKind.SCHEMA_LIST, JsonShape.ARRAY, versions=since(D4))
    ONE_OF = _keyword("oneOf", KeywordKind.SCHEMA_LIST, JsonShape.ARRAY, versions=since(D4))
    NOT = _schema_keyword("not", versions=since(D4))
    EXTENDS = _keyword(
        "extends", KeywordKind.SCHEMA_LIST, JsonShape.OBJECT, JsonShape.ARRAY, versions=until(D3)
    )

    FORMAT = _keyword("format", KeywordKind.STRING, JsonShape.STRING, applies_to=STRING)

    MULTIPLE_OF = _keyword(
        "multipleOf", KeywordKind.NUMBER, JsonShape.NUMBER, versions=since(D4), applies_to=NUMERIC
    )
    DIVISIBLE_BY = _keyword(
        "divisibleBy", KeywordKind.NUMBER, JsonShape.NUMBER, versions=until(D3), applies_to=NUMERIC
    )
    MINIMUM = _keyword("minimum", KeywordKind.LIMIT, JsonShape.NUMBER, applies_to=NUMERIC)
    MAXIMUM = _keyword("maximum", KeywordKind.LIMIT, JsonShape.NUMBER, applies_to=NUMERIC)
    EXCLUSIVE_MINIMUM = _keyword(
        "exclusiveMinimum",
        KeywordKind.BOOLEAN,
        JsonShape.BOOLEAN,
        applies_to=NUMERIC,
        variants=(
            KeywordVariant(
                versions=since(D6), kind=KeywordKind.NUMBER, expects=frozenset({JsonShape.NUMBER})
            ),
        ),
        merged_into="minimum",
    )
    EXCLUSIVE_MAXIMUM = _keyword(
        "exclusiveMaximum",
        KeywordKind.BOOLEAN,
        JsonShape.BOOLEAN,
        applies_to=NUMERIC,
        variants=(
            KeywordVariant(
                versions=since(D6), kind=KeywordKind.NUMBER, expects=frozenset({JsonShape.NUMBER})
            ),
        ),
        merged_into="maximum",
    )

    MIN_LENGTH = _keyword("minLength", KeywordKind.NUMBER, JsonShape.NUMBER, applies_to=STRING)
    MAX_LENGTH = _keyword("maxLength", KeywordKind.NUMBER, JsonShape.NUMBER, applies_to=STRING)
    PATTERN = _keyword("pattern", KeywordKind.STRING, JsonShape.STRING, applies_to=STRING)

    ITEMS = _keyword(
        "items",
        KeywordKind.ITEMS,
        JsonShape.OBJECT,
        JsonShape.ARRAY,
        applies_to=ARRAY,
        variants=(
            KeywordVariant(
                versions=since(D6),
                kind=KeywordKind.ITEMS,
                expects=frozenset({JsonShape.OBJECT, JsonShape.ARRAY, JsonShape.BOOLEAN}),
            ),
        ),
    )
    ADDITIONAL_ITEMS = _keyword(
        "additionalItems",
        KeywordKind.SCHEMA,
        JsonShape.OBJECT,
        JsonShape.BOOLEAN,
        applies_to=ARRAY,
        merged_into="items",
    )
    MIN_ITEMS = _keyword("minItems", KeywordKind.NUMBER, JsonShape.NUMBER, applies_to=ARRAY)
    MAX_ITEMS = _keyword("maxItems", KeywordKind.NUMBER, JsonShape.NUMBER, applies_to=ARRAY)
    UNIQUE_ITEMS = _keyword("uniqueItems", KeywordKind.BOOLEAN, JsonShape.BOOLEAN, applies_to=ARRAY)
    CONTAINS = _schema_keyword("contains", versions=since(D6), applies_to=ARRAY)

    PROPERTIES = _keyword("properties", KeywordKind.SCHEMA_MAP, JsonShape.OBJECT, applies_to=OBJECT)
    PATTERN_PROPERTIES = _keyword(
        "patternProperties", KeywordKind.SCHEMA_MAP, JsonShape.OBJECT, applies_to=OBJECT
    )
    ADDITIONAL_PROPERTIES = _keyword(
        "additionalProperties",
        KeywordKind.SCHEMA,
        JsonShape.OBJECT,
        JsonShape.BOOLEAN,
        applies_to=OBJECT,
    )
    REQUIRED = _keyword(
        "required",
        KeywordKind.STRING_SET,
        JsonShape.ARRAY,
        applies_to=OBJECT,
        variants=(
            KeywordVariant(
                versions=until(D3), kind=KeywordKind.BOOLEAN, expects=frozenset({JsonShape.BOOLEAN})
            ),
        ),
    )
    MIN_PROPERTIES = _keyword(
        "minProperties", KeywordKind.NUMBER, JsonShape.NUMBER, versions=since(D4), applies_to=OBJECT
    )
    MAX_PROPERTIES = _keyword(
        "maxProperties", KeywordKind.NUMBER, JsonShape.NUMBER, versions=since(D4), applies_to=OBJECT
    )
    PROPERTY_NAMES = _schema_keyword("propertyNames", versions=since(D6), applies_to=OBJECT)
    DEPENDENCIES = _keyword(
        "dependencies", KeywordKind.DEPENDENCIES, JsonShape.OBJECT, applies_to=OBJECT
    )

    @classmethod
    def all(cls) -> list[KeywordMetadata]:
        """Every built-in keyword, in declaration order."""
        return [value for value in vars(cls).values() if isinstance(value, KeywordMetadata)]


# Keywords that must be non-negative integers.
COUNT_KEYWORDS = frozenset(
    {
        Keywords.MIN_LENGTH.key,
        Keywords.MAX_LENGTH.key,
        Keywords.MIN_ITEMS.key,
        Keywords.MAX_ITEMS.key,
        Keywords.MIN_PROPERTIES.key,
        Keywords.MAX_PROPERTIES.key,
    }
)


class KeywordNotFoundError(Exception):
    """Raised when a key names no keyword known to the registry.

    Attributes:
        key: The keyword that was not found
        version: Draft the lookup was scoped to, if any
    """

    def __init__(self, key: str, version: JsonSchemaVersion | None = None) -> None:
        """Initialize keyword not found error.

        Args:
            key: The keyword that was not found
            version: Draft the lookup was scoped to, if any
        """
        scope = f" for draft {version.value}" if version is not None else ""
        super().__init__(f"Keyword '{key}' not found in registry{scope}")
        self.key = key
        self.version = version


class KeywordRegistry:
    """Central registry of keyword metadata.

    Provides:
    - Registration of keywords by key (built-ins plus extensions)
    - Lookup by key, optionally scoped to a draft
    - The keywords constraining a given instance type in a given draft
    """

    def __init__(self, keywords: Iterable[KeywordMetadata] | None = None) -> None:
        """Initialize keyword registry.

        Args:
            keywords: Initial keywords; defaults to every built-in keyword
        """
        # Storage: {key: KeywordMetadata}
        self._keywords: dict[str, KeywordMetadata] = {}
        for metadata in Keywords.all() if keywords is None else keywords:
            self.register(metadata)

    def register(self, metadata: KeywordMetadata) -> None:
        """Register a keyword in the registry.

        Args:
            metadata: KeywordMetadata to register

        Raises:
            ValueError: If a keyword with the same key is already registered
        """
        if metadata.key in self._keywords:
            raise ValueError(f"Keyword '{metadata.key}' already registered")

        self._keywords[metadata.key] = metadata

    def lookup(self, key: str, version: JsonSchemaVersion | None = None) -> KeywordMetadata:
        """Look up a keyword by key.

        Args:
            key: Keyword name
            version: If given, the keyword must be recognized in this draft

        Returns:
            KeywordMetadata for the requested keyword

        Raises:
            KeywordNotFoundError: If the keyword is unknown (in that draft)
        """
        metadata = self._keywords.get(key)

        if metadata is None or (version is not None and not metadata.is_applicable(version)):
            raise KeywordNotFoundError(key, version)

        return metadata

    def find(self, key: str, version: JsonSchemaVersion) -> KeywordMetadata | None:
        """Like ``lookup`` but returns None for unknown keys."""
        metadata = self._keywords.get(key)
        if metadata is None or not metadata.is_applicable(version):
            return None
        return metadata

    def applicable_keywords(
        self, version: JsonSchemaVersion, instance_type: JsonSchemaType
    ) -> frozenset[KeywordMetadata]:
        """Keywords of ``version`` that constrain instances of ``instance_type``."""
        return frozenset(
            metadata
            for metadata in self._keywords.values()
            if metadata.is_applicable(version) and metadata.applies_to_type(instance_type)
        )

    def resolve_variant(
        self, metadata: KeywordMetadata, version: JsonSchemaVersion
    ) -> tuple[KeywordKind, frozenset[JsonShape]]:
        """Kind and accepted value shapes of ``metadata`` in ``version``."""
        variant = metadata.variant_for(version)
        return variant.kind, variant.expects

    def list_keywords(self) -> dict[str, KeywordMetadata]:
        """List all registered keywords.

        Returns:
            Dictionary mapping key to KeywordMetadata
        """
        return self._keywords.copy()


DEFAULT_REGISTRY = KeywordRegistry()
