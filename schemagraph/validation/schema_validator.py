"""JsonSchemaValidator: validation of JSON values against a loaded schema.

Compiles the schema graph once; every ``validate()`` call then runs the
compiled validator tree with a fresh report.
"""

import logging
from collections.abc import Mapping
from typing import Any

from schemagraph.loading.config import LoaderOptions
from schemagraph.loading.loader import SchemaLoader
from schemagraph.model.schema import Schema
from schemagraph.validation.base import SchemaValidator
from schemagraph.validation.factory import ValidatorFactory
from schemagraph.validation.formats import FormatRegistry
from schemagraph.validation.report import ValidationError, ValidationErrorCode, ValidationReport

logger = logging.getLogger(__name__)


class ValidationFailedError(Exception):
    """Raised by ``validate_or_raise`` when an instance is invalid.

    Attributes:
        error: The top-level error of the report
        code: Standardized error code
        message: Human-readable error description
        path: Pointer to the invalid value (``#/a/0``)
        schema_path: Location of the schema that was violated
    """

    def __init__(self, error: ValidationError) -> None:
        """Initialize validation error.

        Args:
            error: The top-level error of the report
        """
        super().__init__(error.formatted_message)
        self.error = error
        self.code = error.code
        self.message = error.formatted_message
        self.path = error.pointer
        self.schema_path = error.schema_location


class JsonSchemaValidator:
    """Validates data against a JSON Schema.

    Accepts a loaded ``Schema`` or a raw schema document, which is loaded
    with ``SchemaLoader`` first.
    """

    def __init__(
        self,
        schema: Schema | Mapping[str, Any] | bool,
        formats: FormatRegistry | None = None,
        options: LoaderOptions | None = None,
    ) -> None:
        """Initialize schema validator.

        Args:
            schema: Loaded schema, or a schema document
            formats: Format predicates; defaults to ``FormatRegistry.default()``
            options: Loader options used when ``schema`` is a document

        Raises:
            SchemaLoadingException: If a schema document cannot be loaded
            TypeError: If ``schema`` is neither a Schema nor a document
        """
        if isinstance(schema, (Mapping, bool)):
            with SchemaLoader(options) as loader:
                schema = loader.read_schema(schema)
        if not isinstance(schema, Schema):
            raise TypeError(f"Expected a Schema or a schema document, got {type(schema).__name__}")

        self.schema = schema
        self.validator: SchemaValidator = ValidatorFactory(formats).compile(schema)

    def validate(self, instance: Any) -> ValidationReport:
        """Validate an instance.

        Args:
            instance: Any JSON value

        Returns:
            Report holding at most one top-level error
        """
        report = ValidationReport()
        self.validator.validate(instance, report)
        if not report.is_valid:
            logger.debug(f"Validation failed with {len(report.leaves())} violation(s)")
        return report

    def is_valid(self, instance: Any) -> bool:
        return self.validator.validate(instance)

    def validate_or_raise(self, instance: Any) -> None:
        """Validate an instance, raising on failure.

        Args:
            instance: Any JSON value

        Raises:
            ValidationFailedError: With the top-level error of the report

        Returns:
            None if validation succeeds
        """
        report = self.validate(instance)
        if report.top_error is not None:
            raise ValidationFailedError(report.top_error)


__all__ = [
    "JsonSchemaValidator",
    "ValidationErrorCode",
    "ValidationFailedError",
]
