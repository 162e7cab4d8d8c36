"""ValidationReport: the error tree produced by one ``validate()`` call.

Errors form a tree. Leaves are single keyword violations; aggregate nodes
(combinators, or a schema with several failing keywords) hold the violations
that caused them in ``causes``.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from schemagraph.model.json_utils import escape_segment
from schemagraph.model.uris import encode_fragment


class ValidationErrorCode(str, Enum):
    """Standardized validation error codes."""

    SCHEMA = "validation.schema"  # Several keywords of one schema failed
    SCHEMA_FALSE = "validation.schema.false"  # The schema is `false`
    TYPE = "validation.keyword.type"
    DISALLOW = "validation.keyword.disallow"
    ENUM = "validation.keyword.enum"
    CONST = "validation.keyword.const"
    ALL_OF = "validation.keyword.allOf"
    ANY_OF = "validation.keyword.anyOf"
    ONE_OF = "validation.keyword.oneOf"
    NOT = "validation.keyword.not"
    EXTENDS = "validation.keyword.extends"
    REF = "validation.keyword.$ref"
    FORMAT = "validation.keyword.format"
    MULTIPLE_OF = "validation.keyword.multipleOf"
    DIVISIBLE_BY = "validation.keyword.divisibleBy"
    MINIMUM = "validation.keyword.minimum"
    MAXIMUM = "validation.keyword.maximum"
    MIN_LENGTH = "validation.keyword.minLength"
    MAX_LENGTH = "validation.keyword.maxLength"
    PATTERN = "validation.keyword.pattern"
    ITEMS = "validation.keyword.items"
    ADDITIONAL_ITEMS = "validation.keyword.additionalItems"
    MIN_ITEMS = "validation.keyword.minItems"
    MAX_ITEMS = "validation.keyword.maxItems"
    UNIQUE_ITEMS = "validation.keyword.uniqueItems"
    CONTAINS = "validation.keyword.contains"
    ADDITIONAL_PROPERTIES = "validation.keyword.additionalProperties"
    REQUIRED = "validation.keyword.required"
    MIN_PROPERTIES = "validation.keyword.minProperties"
    MAX_PROPERTIES = "validation.keyword.maxProperties"
    PROPERTY_NAMES = "validation.keyword.propertyNames"
    DEPENDENCIES = "validation.keyword.dependencies"

    @classmethod
    def for_keyword(cls, key: str) -> "ValidationErrorCode":
        """Code of a violation of ``key``.

        Raises:
            ValueError: If ``key`` is not a validated keyword
        """
        return cls(f"validation.keyword.{key}")


@dataclass(frozen=True)
class ValidationError:
    """One node of the validation error tree.

    Attributes:
        pointer: Instance location in ``#/a/0`` form
        schema_location: URI of the schema (or keyword) that failed
        keyword: Failing keyword; None for aggregate schema errors
        code: Standardized error code
        message: Message template with ``{}`` placeholders
        arguments: Values substituted into ``message``
        causes: Nested errors; empty for leaves
    """

    pointer: str
    schema_location: str
    keyword: str | None
    code: ValidationErrorCode
    message: str
    arguments: tuple[Any, ...] = ()
    causes: tuple["ValidationError", ...] = field(default=())

    @property
    def formatted_message(self) -> str:
        return self.message.format(*self.arguments)

    @property
    def is_leaf(self) -> bool:
        return not self.causes

    def leaves(self) -> list["ValidationError"]:
        """Leaf errors below (or equal to) this one, depth-first."""
        if self.is_leaf:
            return [self]
        return [leaf for cause in self.causes for leaf in cause.leaves()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pointer": self.pointer,
            "schema_location": self.schema_location,
            "keyword": self.keyword,
            "code": self.code.value,
            "message": self.formatted_message,
            "causes": [cause.to_dict() for cause in self.causes],
        }

    def __str__(self) -> str:
        keyword = f" [{self.keyword}]" if self.keyword else ""
        return f"{self.pointer}{keyword}: {self.formatted_message} (schema: {self.schema_location})"


class ValidationReport:
    """Mutable accumulator of errors for one ``validate()`` call.

    Child reports created with ``create_child_report()`` are disposable: a
    combinator runs a trial into a child, then drops it or folds it into an
    aggregate error with ``add_report()``.
    """

    def __init__(self, _active: set[tuple[int, int, str]] | None = None) -> None:
        self._errors: list[ValidationError] = []
        # (validator, instance, pointer) triples currently being evaluated by
        # $ref validators; shared with every child report.
        self._active = _active if _active is not None else set()

    @property
    def errors(self) -> list[ValidationError]:
        return list(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def top_error(self) -> ValidationError | None:
        return self._errors[0] if self._errors else None

    @property
    def active(self) -> set[tuple[int, int, str]]:
        return self._active

    def add_error(self, error: ValidationError) -> None:
        self._errors.append(error)

    def error(
        self,
        pointer: str,
        schema_location: str,
        keyword: str,
        message: str,
        *arguments: Any,
    ) -> ValidationError:
        """Add a leaf error for ``keyword``."""
        error = ValidationError(
            pointer=pointer,
            schema_location=schema_location,
            keyword=keyword,
            code=ValidationErrorCode.for_keyword(keyword),
            message=message,
            arguments=arguments,
        )
        self.add_error(error)
        return error

    def create_child_report(self) -> "ValidationReport":
        return ValidationReport(self._active)

    def add_report(
        self,
        child: "ValidationReport",
        pointer: str,
        schema_location: str,
        keyword: str,
        message: str,
        *arguments: Any,
    ) -> ValidationError:
        """Fold ``child``'s errors into one new aggregate error for ``keyword``."""
        error = ValidationError(
            pointer=pointer,
            schema_location=schema_location,
            keyword=keyword,
            code=ValidationErrorCode.for_keyword(keyword),
            message=message,
            arguments=arguments,
            causes=tuple(child._errors),
        )
        self.add_error(error)
        return error

    def collect(self, child: "ValidationReport", pointer: str, schema_location: str) -> bool:
        """Fold the errors of one schema into at most one error.

        No errors add nothing, a single error is added as is, several become
        the causes of one aggregate error without a keyword.

        Returns:
            Whether ``child`` was valid
        """
        if not child._errors:
            return True
        if len(child._errors) == 1:
            self.add_error(child._errors[0])
        else:
            self.add_error(
                ValidationError(
                    pointer=pointer,
                    schema_location=schema_location,
                    keyword=None,
                    code=ValidationErrorCode.SCHEMA,
                    message="{} schema violations found",
                    arguments=(len(child._errors),),
                    causes=tuple(child._errors),
                )
            )
        return False

    def leaves(self) -> list[ValidationError]:
        return [leaf for error in self._errors for leaf in error.leaves()]

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __str__(self) -> str:
        if not self._errors:
            return "Instance is valid"
        lines = [f"Instance is invalid: {len(self.leaves())} violation(s)"]
        for leaf in self.leaves():
            lines.append(f"  - {leaf}")
        return "\n".join(lines)


def join_location(base: str, *segments: str | int) -> str:
    """Append pointer segments to a schema location (``uri#/a`` form, percent-encoded)."""
    if "#" not in base:
        base += "#"
    return base + encode_fragment("".join("/" + escape_segment(str(segment)) for segment in segments))
