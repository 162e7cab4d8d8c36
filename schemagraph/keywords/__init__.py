"""Keyword registry: static metadata for every recognized JSON Schema keyword."""

from schemagraph.keywords.metadata import (
    JsonSchemaType,
    JsonSchemaVersion,
    JsonShape,
    KeywordKind,
    KeywordMetadata,
    KeywordVariant,
)
from schemagraph.keywords.registry import (
    DEFAULT_REGISTRY,
    KeywordNotFoundError,
    KeywordRegistry,
    Keywords,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "JsonSchemaType",
    "JsonSchemaVersion",
    "JsonShape",
    "KeywordKind",
    "KeywordMetadata",
    "KeywordNotFoundError",
    "KeywordRegistry",
    "KeywordVariant",
    "Keywords",
]
