"""KeywordMetadata: static description of a JSON Schema keyword.

Each keyword the loader understands is described once, at import time, by a
frozen ``KeywordMetadata``: which drafts it belongs to, which JSON shapes its
value may take, which instance types it constrains and which ``SchemaKeyword``
kind the loader produces for it. Keywords whose accepted shape changed across
drafts carry ``variants``.
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class JsonSchemaVersion(IntEnum):
    """Supported JSON Schema drafts, ordered by release."""

    DRAFT3 = 3
    DRAFT4 = 4
    DRAFT6 = 6

    @property
    def schema_uri(self) -> str:
        """Canonical ``$schema`` URI of the draft."""
        return f"http://json-schema.org/draft-0{self.value}/schema#"

    @property
    def id_key(self) -> str:
        """Keyword used to declare a schema identifier in this draft."""
        return "$id" if self >= JsonSchemaVersion.DRAFT6 else "id"

    @classmethod
    def from_schema_uri(cls, uri: str) -> "JsonSchemaVersion | None":
        """Detect the draft named by a ``$schema`` value.

        Args:
            uri: Value of the ``$schema`` keyword

        Returns:
            The matching draft, or None if the URI names no supported draft
        """
        for version in cls:
            if f"draft-0{version.value}" in uri:
                return version
        return None


ALL_VERSIONS: frozenset[JsonSchemaVersion] = frozenset(JsonSchemaVersion)


def since(version: JsonSchemaVersion) -> frozenset[JsonSchemaVersion]:
    """Drafts from ``version`` onwards."""
    return frozenset(v for v in JsonSchemaVersion if v >= version)


def until(version: JsonSchemaVersion) -> frozenset[JsonSchemaVersion]:
    """Drafts up to and including ``version``."""
    return frozenset(v for v in JsonSchemaVersion if v <= version)


class JsonSchemaType(str, Enum):
    """Instance types named by the ``type`` keyword.

    ``INTEGER`` is a derived pseudo-type: a number with no fractional part.
    """

    NULL = "null"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NUMBER = "number"
    INTEGER = "integer"
    STRING = "string"

    @classmethod
    def from_name(cls, name: str) -> "JsonSchemaType | None":
        try:
            return cls(name)
        except ValueError:
            return None


class JsonShape(str, Enum):
    """Shape of a raw JSON value, used to check keyword values while loading."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


ANY_SHAPE: frozenset[JsonShape] = frozenset(JsonShape)


class KeywordKind(str, Enum):
    """Kind of ``SchemaKeyword`` value the loader produces for a keyword."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING_SET = "string_set"
    JSON_ARRAY = "json_array"
    JSON_VALUE = "json_value"
    SCHEMA = "schema"
    SCHEMA_LIST = "schema_list"
    SCHEMA_MAP = "schema_map"
    TYPE = "type"
    LIMIT = "limit"
    ITEMS = "items"
    DEPENDENCIES = "dependencies"
    REFERENCE = "reference"


class KeywordVariant(BaseModel):
    """Draft-specific override of a keyword's kind and accepted shapes."""

    model_config = ConfigDict(frozen=True)

    versions: frozenset[JsonSchemaVersion]
    kind: KeywordKind
    expects: frozenset[JsonShape]


class KeywordMetadata(BaseModel):
    """Static metadata for one JSON Schema keyword.

    Instances are used as keys of a schema's keyword mapping, so they are
    immutable and hash by ``key``; keys are unique within a registry.

    Attributes:
        key: Keyword name as it appears in schema documents
        kind: Kind of keyword value produced by the loader
        versions: Drafts in which the keyword is recognized
        applies_to: Instance types the keyword constrains (empty: all types)
        expects: Accepted JSON shapes of the keyword value
        variants: Per-draft overrides of ``kind`` and ``expects``
        merged_into: Key of the keyword whose value absorbs this one
            (``exclusiveMinimum`` folds into ``minimum``)
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    kind: KeywordKind
    versions: frozenset[JsonSchemaVersion] = ALL_VERSIONS
    applies_to: frozenset[JsonSchemaType] = frozenset()
    expects: frozenset[JsonShape] = ANY_SHAPE
    variants: tuple[KeywordVariant, ...] = ()
    merged_into: str | None = None

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.key

    def is_applicable(self, version: JsonSchemaVersion) -> bool:
        """Whether the keyword is recognized in ``version``."""
        return version in self.versions

    def applies_to_type(self, instance_type: JsonSchemaType) -> bool:
        """Whether the keyword constrains instances of ``instance_type``.

        Integers are numbers, so numeric keywords apply to them too.
        """
        if not self.applies_to:
            return True
        if instance_type in self.applies_to:
            return True
        return instance_type is JsonSchemaType.INTEGER and JsonSchemaType.NUMBER in self.applies_to

    def variant_for(self, version: JsonSchemaVersion) -> KeywordVariant:
        """Resolve the kind and accepted shapes of the keyword in ``version``."""
        for variant in self.variants:
            if version in variant.versions:
                return variant
        return KeywordVariant(versions=self.versions, kind=self.kind, expects=self.expects)
