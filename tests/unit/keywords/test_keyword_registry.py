"""Keyword registry: registration, draft-scoped lookup and variants.

Test Coverage:
- Built-in keywords are registered once, by key
- Lookup scoped to a draft rejects keywords of other drafts
- Extension keywords can be registered; duplicates are rejected
- Per-draft variants resolve the value kind and accepted shapes
"""

import pytest
from pydantic import ValidationError

from schemagraph.keywords.metadata import (
    JsonSchemaType,
    JsonSchemaVersion,
    JsonShape,
    KeywordKind,
    KeywordMetadata,
)
from schemagraph.keywords.registry import KeywordNotFoundError, KeywordRegistry, Keywords

D3 = JsonSchemaVersion.DRAFT3
D4 = JsonSchemaVersion.DRAFT4
D6 = JsonSchemaVersion.DRAFT6


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestKeywordRegistry:
    """Keyword registration and lookup."""

    def test_register_and_lookup_keyword(self) -> None:
        """Extension keyword can be registered and looked up."""
        registry = KeywordRegistry()

        metadata = KeywordMetadata(
            key="x-internal",
            kind=KeywordKind.BOOLEAN,
            expects=frozenset({JsonShape.BOOLEAN}),
        )

        registry.register(metadata)
        retrieved = registry.lookup("x-internal", D6)

        assert retrieved.key == "x-internal"
        assert retrieved.kind is KeywordKind.BOOLEAN

    def test_register_duplicate_keyword_rejected(self) -> None:
        """A key can only be registered once."""
        registry = KeywordRegistry()

        with pytest.raises(ValueError) as exc_info:
            registry.register(KeywordMetadata(key="minimum", kind=KeywordKind.NUMBER))

        assert "minimum" in str(exc_info.value)

    def test_lookup_unknown_keyword_raises_error(self) -> None:
        """Unknown keyword returns KeywordNotFoundError."""
        registry = KeywordRegistry()

        with pytest.raises(KeywordNotFoundError) as exc_info:
            registry.lookup("nonexistent_keyword")

        assert "nonexistent_keyword" in str(exc_info.value)
        assert exc_info.value.key == "nonexistent_keyword"

    def test_lookup_keyword_of_other_draft_raises_error(self) -> None:
        """divisibleBy only exists in draft 3."""
        registry = KeywordRegistry()

        assert registry.lookup("divisibleBy", D3) == Keywords.DIVISIBLE_BY
        with pytest.raises(KeywordNotFoundError) as exc_info:
            registry.lookup("divisibleBy", D4)

        assert exc_info.value.version is D4
        assert "4" in str(exc_info.value)

    def test_find_returns_none_for_other_draft(self) -> None:
        registry = KeywordRegistry()

        assert registry.find("$id", D6) == Keywords.DOLLAR_ID
        assert registry.find("id", D6) is None
        assert registry.find("id", D4) == Keywords.ID
        assert registry.find("const", D4) is None

    def test_registry_restricted_to_given_keywords(self) -> None:
        registry = KeywordRegistry([Keywords.TYPE, Keywords.ENUM])

        assert set(registry.list_keywords()) == {"type", "enum"}
        assert registry.find("minimum", D6) is None

    def test_list_keywords_returns_copy(self) -> None:
        registry = KeywordRegistry()

        listed = registry.list_keywords()
        listed.pop("type")

        assert "type" in registry.list_keywords()


@pytest.mark.unit
@pytest.mark.P1
@pytest.mark.deterministic
class TestApplicableKeywords:
    """Keywords constraining a given instance type."""

    def test_string_keywords(self) -> None:
        applicable = KeywordRegistry().applicable_keywords(D6, JsonSchemaType.STRING)

        assert Keywords.MIN_LENGTH in applicable
        assert Keywords.TYPE in applicable
        assert Keywords.MINIMUM not in applicable
        assert Keywords.PROPERTIES not in applicable

    def test_integer_instances_get_numeric_keywords(self) -> None:
        applicable = KeywordRegistry().applicable_keywords(D4, JsonSchemaType.INTEGER)

        assert Keywords.MINIMUM in applicable
        assert Keywords.MULTIPLE_OF in applicable
        assert Keywords.DIVISIBLE_BY not in applicable

    def test_draft3_keywords(self) -> None:
        applicable = KeywordRegistry().applicable_keywords(D3, JsonSchemaType.NUMBER)

        assert Keywords.DIVISIBLE_BY in applicable
        assert Keywords.DISALLOW in applicable
        assert Keywords.ALL_OF not in applicable


@pytest.mark.unit
@pytest.mark.P1
@pytest.mark.deterministic
class TestKeywordVariants:
    """Per-draft kinds and accepted shapes."""

    def test_exclusive_minimum_is_boolean_before_draft6(self) -> None:
        registry = KeywordRegistry()

        kind, expects = registry.resolve_variant(Keywords.EXCLUSIVE_MINIMUM, D4)

        assert kind is KeywordKind.BOOLEAN
        assert expects == frozenset({JsonShape.BOOLEAN})

    def test_exclusive_minimum_is_numeric_in_draft6(self) -> None:
        registry = KeywordRegistry()

        kind, expects = registry.resolve_variant(Keywords.EXCLUSIVE_MINIMUM, D6)

        assert kind is KeywordKind.NUMBER
        assert expects == frozenset({JsonShape.NUMBER})

    def test_required_is_boolean_in_draft3(self) -> None:
        registry = KeywordRegistry()

        assert registry.resolve_variant(Keywords.REQUIRED, D3)[0] is KeywordKind.BOOLEAN
        assert registry.resolve_variant(Keywords.REQUIRED, D4)[0] is KeywordKind.STRING_SET

    def test_boolean_schemas_accepted_from_draft6(self) -> None:
        registry = KeywordRegistry()

        assert JsonShape.BOOLEAN not in registry.resolve_variant(Keywords.NOT, D4)[1]
        assert JsonShape.BOOLEAN in registry.resolve_variant(Keywords.NOT, D6)[1]
        assert JsonShape.BOOLEAN in registry.resolve_variant(Keywords.ITEMS, D6)[1]


@pytest.mark.unit
@pytest.mark.P1
@pytest.mark.deterministic
class TestKeywordMetadata:
    """Static keyword metadata and draft detection."""

    def test_metadata_is_immutable(self) -> None:
        with pytest.raises(ValidationError):
            Keywords.TYPE.key = "kind"

    def test_metadata_hashes_by_key(self) -> None:
        copy = KeywordMetadata(key="type", kind=KeywordKind.TYPE)

        assert hash(copy) == hash(Keywords.TYPE)
        assert str(Keywords.TYPE) == "type"

    def test_applies_to_numbers_includes_integers(self) -> None:
        assert Keywords.MAXIMUM.applies_to_type(JsonSchemaType.INTEGER)
        assert not Keywords.MAXIMUM.applies_to_type(JsonSchemaType.STRING)
        assert Keywords.ENUM.applies_to_type(JsonSchemaType.NULL)

    def test_version_from_schema_uri(self) -> None:
        assert JsonSchemaVersion.from_schema_uri("http://json-schema.org/draft-03/schema#") is D3
        assert JsonSchemaVersion.from_schema_uri("http://json-schema.org/draft-04/schema") is D4
        assert JsonSchemaVersion.from_schema_uri("http://json-schema.org/draft-06/schema#") is D6
        assert JsonSchemaVersion.from_schema_uri("http://json-schema.org/draft-07/schema#") is None

    def test_id_key_per_draft(self) -> None:
        assert D3.id_key == "id"
        assert D4.id_key == "id"
        assert D6.id_key == "$id"
        assert D4.schema_uri == "http://json-schema.org/draft-04/schema#"
