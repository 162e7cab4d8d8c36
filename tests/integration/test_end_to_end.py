"""End-to-end loading and validation of realistic schema documents.

These tests go from raw documents (and a YAML options file) to validation
reports without mocking any schemagraph component; only the network client
is replaced.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from schemagraph import (
    JsonSchemaValidator,
    SchemaLoader,
    SchemaLoadingException,
    ValidationFailedError,
    load_options,
)
from schemagraph.loading.documents import DocumentFetchError

CATALOG_URI = "https://schemas.example.com/catalog.json"
COMMON_URI = "https://schemas.example.com/common.json"

COMMON = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "id": COMMON_URI,
    "definitions": {
        "money": {
            "type": "object",
            "properties": {
                "amount": {"type": "number", "multipleOf": 0.01, "minimum": 0},
                "currency": {"type": "string", "pattern": "^[A-Z]{3}$"},
            },
            "required": ["amount", "currency"],
            "additionalProperties": False,
        },
        "sku": {"type": "string", "minLength": 4, "maxLength": 12},
    },
}

CATALOG = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "id": CATALOG_URI,
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "products": {"type": "array", "items": {"$ref": "#/definitions/product"}, "minItems": 1},
    },
    "required": ["name", "products"],
    "definitions": {
        "product": {
            "type": "object",
            "properties": {
                "sku": {"$ref": "common.json#/definitions/sku"},
                "price": {"$ref": "common.json#/definitions/money"},
                "tags": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
                "variants": {"type": "array", "items": {"$ref": "#/definitions/product"}},
            },
            "required": ["sku", "price"],
        }
    },
}

VALID_CATALOG = {
    "name": "Spring",
    "products": [
        {
            "sku": "SHIRT-01",
            "price": {"amount": 19.99, "currency": "EUR"},
            "tags": ["cotton", "blue"],
            "variants": [{"sku": "SHIRT-01L", "price": {"amount": 21.5, "currency": "EUR"}}],
        }
    ],
}


def _catalog_validator() -> JsonSchemaValidator:
    loader = SchemaLoader(document_client=Mock()).preload(COMMON_URI, COMMON)
    return JsonSchemaValidator(loader.read_schema(CATALOG))


@pytest.mark.integration
class TestCatalogSchema:
    """A draft 4 schema split over two documents with a recursive definition."""

    def test_valid_catalog(self) -> None:
        report = _catalog_validator().validate(VALID_CATALOG)

        assert report.is_valid
        assert str(report) == "Instance is valid"

    def test_nested_violation_locations(self) -> None:
        catalog = {
            "name": "Spring",
            "products": [
                {
                    "sku": "SHIRT-01",
                    "price": {"amount": 19.99, "currency": "EUR"},
                    "variants": [{"sku": "S1", "price": {"amount": 1.005, "currency": "eur", "tax": 0}}],
                }
            ],
        }

        report = _catalog_validator().validate(catalog)

        leaves = {(leaf.pointer, leaf.keyword) for leaf in report.leaves()}
        assert leaves == {
            ("#/products/0/variants/0/sku", "minLength"),
            ("#/products/0/variants/0/price/amount", "multipleOf"),
            ("#/products/0/variants/0/price/currency", "pattern"),
            ("#/products/0/variants/0/price/tax", "additionalProperties"),
        }
        money = COMMON_URI + "#/definitions/money"
        locations = {leaf.schema_location for leaf in report.leaves()}
        assert money + "/properties/currency/pattern" in locations
        assert money + "/additionalProperties" in locations

    def test_report_lists_every_violation(self) -> None:
        report = _catalog_validator().validate({"products": []})

        lines = str(report).splitlines()
        assert lines[0] == "Instance is invalid: 2 violation(s)"
        assert any("required key [name] not found" in line for line in lines)
        assert any("expected minimum item count: 1, found: 0" in line for line in lines)

    def test_duplicate_tags(self) -> None:
        catalog = {
            "name": "Spring",
            "products": [{"sku": "SHIRT-01", "price": {"amount": 1, "currency": "EUR"}, "tags": ["a", "a"]}],
        }

        with pytest.raises(ValidationFailedError) as exc_info:
            _catalog_validator().validate_or_raise(catalog)

        assert exc_info.value.path == "#/products/0/tags"
        assert exc_info.value.message == "array items at 0 and 1 are not unique"

    def test_missing_common_document_fails_loading(self) -> None:
        client = Mock()
        client.fetch.side_effect = DocumentFetchError(COMMON_URI, "unreachable")

        with pytest.raises(SchemaLoadingException):
            SchemaLoader(document_client=client).read_schema(CATALOG)


@pytest.mark.integration
class TestDraftDocuments:
    def test_draft6_document(self) -> None:
        validator = JsonSchemaValidator(
            {
                "$schema": "http://json-schema.org/draft-06/schema#",
                "$id": "https://schemas.example.com/event.json",
                "type": "object",
                "propertyNames": {"pattern": "^[a-z_]+$"},
                "properties": {
                    "kind": {"const": "click"},
                    "at": {"type": "integer", "exclusiveMinimum": 0},
                    "targets": {"type": "array", "contains": {"type": "string"}},
                    "extra": False,
                },
            }
        )

        assert validator.is_valid({"kind": "click", "at": 1, "targets": [1, "button"]})
        assert not validator.is_valid({"kind": "click", "at": 0})
        assert not validator.is_valid({"kind": "click", "Bad": 1})
        assert not validator.is_valid({"kind": "click", "extra": None})

    def test_draft3_document(self) -> None:
        validator = JsonSchemaValidator(
            {
                "$schema": "http://json-schema.org/draft-03/schema#",
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "required": True},
                    "ratio": {"type": "number", "divisibleBy": 0.5},
                    "owner": {"type": ["string", "null"], "disallow": "null"},
                },
                "dependencies": {"ratio": "owner"},
                "extends": {"properties": {"id": {"minimum": 1}}},
            }
        )

        assert validator.is_valid({"id": 3, "ratio": 1.5, "owner": "ops"})
        assert not validator.is_valid({"ratio": 1.5, "owner": "ops"})
        assert not validator.is_valid({"id": 0})
        assert not validator.is_valid({"id": 3, "ratio": 1.5})
        assert not validator.is_valid({"id": 3, "owner": None})


@pytest.mark.integration
class TestOptionsFile:
    def test_strict_options_from_yaml(self, tmp_path: Path) -> None:
        options_path = tmp_path / "schemagraph.yaml"
        options_path.write_text("strict: true\ndefault_version: draft4\nallow_remote_fetch: false\n")

        options = load_options(options_path)

        with pytest.raises(SchemaLoadingException):
            SchemaLoader(options).read_schema({"type": "object", "x-vendor": True})
        assert JsonSchemaValidator({"type": "object"}, options=options).is_valid({})
