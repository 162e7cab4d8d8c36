"""schemagraph: JSON Schema loading and validation over an immutable schema graph.

Typical use::

    from schemagraph import JsonSchemaValidator, SchemaLoader

    schema = SchemaLoader().read_schema({"type": "object", "required": ["id"]})
    report = JsonSchemaValidator(schema).validate({"id": 1})
"""

__version__ = "0.1.0"

from schemagraph.keywords.metadata import JsonSchemaType, JsonSchemaVersion, KeywordMetadata
from schemagraph.keywords.registry import KeywordNotFoundError, KeywordRegistry, Keywords
from schemagraph.loading.config import LoaderOptions, load_options
from schemagraph.loading.loader import LoadingContext, SchemaLoader
from schemagraph.loading.report import LoadingReport, SchemaLoadingException
from schemagraph.model.location import SchemaLocation
from schemagraph.model.schema import FALSE_SCHEMA, TRUE_SCHEMA, Schema, SchemaBuilder
from schemagraph.validation.base import SchemaValidator
from schemagraph.validation.factory import ValidatorFactory
from schemagraph.validation.formats import FormatRegistry
from schemagraph.validation.report import ValidationError, ValidationReport
from schemagraph.validation.schema_validator import (
    JsonSchemaValidator,
    ValidationErrorCode,
    ValidationFailedError,
)

__all__ = [
    "__version__",
    "FALSE_SCHEMA",
    "TRUE_SCHEMA",
    "FormatRegistry",
    "JsonSchemaType",
    "JsonSchemaValidator",
    "JsonSchemaVersion",
    "KeywordMetadata",
    "KeywordNotFoundError",
    "KeywordRegistry",
    "Keywords",
    "LoaderOptions",
    "LoadingContext",
    "LoadingReport",
    "Schema",
    "SchemaBuilder",
    "SchemaLoader",
    "SchemaLoadingException",
    "SchemaLocation",
    "SchemaValidator",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationFailedError",
    "ValidationReport",
    "ValidatorFactory",
    "load_options",
]
