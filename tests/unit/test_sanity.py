"""Smoke tests for the public package surface."""

import pytest

import schemagraph


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
def test_version() -> None:
    """Package exposes its release version."""
    assert schemagraph.__version__ == "0.1.0"


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
def test_public_names_resolve() -> None:
    """Every name in __all__ is importable from the top-level package."""
    missing = [name for name in schemagraph.__all__ if not hasattr(schemagraph, name)]

    assert missing == [], f"Unresolved exports: {missing}"


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
def test_quickstart() -> None:
    """The usage shown in the package docstring works."""
    schema = schemagraph.SchemaLoader().read_schema({"type": "object", "required": ["id"]})
    validator = schemagraph.JsonSchemaValidator(schema)

    assert validator.validate({"id": 1}).is_valid
    assert not validator.is_valid({})
