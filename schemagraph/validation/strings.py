"""Validators for string keywords. Lengths count Unicode code points."""

import re

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.validation.base import InstanceNode, KeywordValidator
from schemagraph.validation.formats import FormatPredicate
from schemagraph.validation.report import ValidationReport


class MinLengthValidator(KeywordValidator):
    """``minLength`` in code points."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, length: int) -> None:
        super().__init__(keyword, schema_location)
        self.length = int(length)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a string shorter than the limit."""
        if len(node.value) < self.length:
            self.fail(node, report, "expected minLength {}, actual {}", self.length, len(node.value))


class MaxLengthValidator(KeywordValidator):
    """``maxLength`` in code points."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, length: int) -> None:
        super().__init__(keyword, schema_location)
        self.length = int(length)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a string longer than the limit."""
        if len(node.value) > self.length:
            self.fail(node, report, "expected maxLength {}, actual {}", self.length, len(node.value))


class PatternValidator(KeywordValidator):
    """Unanchored regular expression search."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, pattern: str) -> None:
        super().__init__(keyword, schema_location)
        self.pattern = pattern
        self._regex = re.compile(pattern)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a string the pattern does not match."""
        if self._regex.search(node.value) is None:
            self.fail(node, report, "string {} does not match pattern {}", node.value, self.pattern)


class FormatValidator(KeywordValidator):
    """``format`` backed by a known checker predicate."""

    def __init__(
        self, keyword: KeywordMetadata, schema_location: str, name: str, predicate: FormatPredicate
    ) -> None:
        super().__init__(keyword, schema_location)
        self.name = name
        self.predicate = predicate

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a string rejected by the format checker."""
        if not self.predicate(node.value):
            self.fail(node, report, "{} is not a valid {}", node.value, self.name)
