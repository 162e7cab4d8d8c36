"""Validator composition engine: compiled validator trees and error reports."""

from schemagraph.validation.base import InstanceNode, KeywordValidator, SchemaValidator
from schemagraph.validation.factory import ValidatorFactory
from schemagraph.validation.formats import FormatRegistry
from schemagraph.validation.report import ValidationError, ValidationErrorCode, ValidationReport
from schemagraph.validation.schema_validator import JsonSchemaValidator, ValidationFailedError

__all__ = [
    "FormatRegistry",
    "InstanceNode",
    "JsonSchemaValidator",
    "KeywordValidator",
    "SchemaValidator",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationFailedError",
    "ValidationReport",
    "ValidatorFactory",
]
