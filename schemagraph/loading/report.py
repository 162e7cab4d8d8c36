"""LoadingReport: diagnostics accumulated while loading a schema document."""

import logging
from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class LoadingIssueLevel(str, Enum):
    """Severity of a loading issue."""

    ERROR = "error"
    WARN = "warn"


class LoadingIssueCode(str, Enum):
    """Standardized loading issue codes."""

    KEYWORD_UNKNOWN = "keyword.unknown"  # Key names no keyword of the draft
    KEYWORD_TYPE_MISMATCH = "keyword.type.mismatch"  # Value has the wrong JSON shape
    KEYWORD_MISSING = "keyword.missing"  # Keyword needs a companion that is absent
    KEYWORD_CONFLICTING = "keyword.conflicting"  # Keyword contradicts another
    KEYWORD_INVALID = "keyword.invalid"  # Value out of range or unparsable
    URI_MALFORMED = "uri.malformed"  # $id or $ref is not a URI reference
    SCHEMA_TYPE_MISMATCH = "schema.type.mismatch"  # Subschema is neither object nor boolean
    REF_SIBLINGS_IGNORED = "ref.siblings.ignored"  # Keywords next to $ref are dropped
    REF_UNRESOLVABLE = "ref.unresolvable"  # $ref target does not exist
    DOCUMENT_FETCH_FAILED = "document.fetch.failed"  # Remote document unavailable


# Codes that stop the session regardless of mode.
FATAL_CODES = frozenset({LoadingIssueCode.REF_UNRESOLVABLE, LoadingIssueCode.DOCUMENT_FETCH_FAILED})


class LoadingIssue(BaseModel):
    """One diagnostic recorded by the loader.

    Attributes:
        code: Standardized issue code
        level: ERROR or WARN
        location: Absolute URI of the schema node the issue concerns
        message: Message template with ``{}`` placeholders
        arguments: Values substituted into ``message``
    """

    model_config = ConfigDict(frozen=True)

    code: LoadingIssueCode
    level: LoadingIssueLevel
    location: str = Field(..., description="Absolute URI of the offending node")
    message: str
    arguments: tuple[Any, ...] = ()

    @classmethod
    def error(cls, code: LoadingIssueCode, location: object, message: str, *arguments: Any) -> "LoadingIssue":
        return cls(
            code=code,
            level=LoadingIssueLevel.ERROR,
            location=str(location),
            message=message,
            arguments=arguments,
        )

    @classmethod
    def warn(cls, code: LoadingIssueCode, location: object, message: str, *arguments: Any) -> "LoadingIssue":
        return cls(
            code=code,
            level=LoadingIssueLevel.WARN,
            location=str(location),
            message=message,
            arguments=arguments,
        )

    @property
    def is_error(self) -> bool:
        return self.level is LoadingIssueLevel.ERROR

    @property
    def is_fatal(self) -> bool:
        return self.code in FATAL_CODES

    @property
    def formatted_message(self) -> str:
        return self.message.format(*self.arguments)

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.code.value} at {self.location}: {self.formatted_message}"


class LoadingReport:
    """Ordered list of issues recorded during one loading session."""

    def __init__(self) -> None:
        self._issues: list[LoadingIssue] = []

    def add(self, issue: LoadingIssue) -> None:
        self._issues.append(issue)
        if issue.is_error:
            logger.warning(f"Schema loading error: {issue}")
        else:
            logger.warning(f"Schema loading warning: {issue}")

    @property
    def issues(self) -> list[LoadingIssue]:
        return list(self._issues)

    @property
    def errors(self) -> list[LoadingIssue]:
        return [issue for issue in self._issues if issue.is_error]

    @property
    def warnings(self) -> list[LoadingIssue]:
        return [issue for issue in self._issues if not issue.is_error]

    @property
    def has_errors(self) -> bool:
        return any(issue.is_error for issue in self._issues)

    def codes(self) -> list[LoadingIssueCode]:
        return [issue.code for issue in self._issues]

    def __iter__(self) -> Iterator[LoadingIssue]:
        return iter(list(self._issues))

    def __len__(self) -> int:
        return len(self._issues)

    def __str__(self) -> str:
        if not self._issues:
            return "No loading issues"
        return "\n".join(str(issue) for issue in self._issues)


class SchemaLoadingException(Exception):
    """Raised when a schema cannot be loaded.

    Attributes:
        report: The full report of the session
        code: Code of the first error (None if the report holds no error)
    """

    def __init__(self, report: LoadingReport) -> None:
        errors = report.errors
        self.report = report
        self.code = errors[0].code if errors else None
        if errors:
            summary = f"{len(errors)} error(s) while loading schema; first: {errors[0]}"
        else:
            summary = "Schema loading failed"
        super().__init__(summary)

    @property
    def issues(self) -> list[LoadingIssue]:
        return self.report.issues
