"""Validators for numeric keywords."""

import math
from decimal import Decimal
from fractions import Fraction

from schemagraph.keywords.metadata import KeywordMetadata
from schemagraph.model.json_utils import to_fraction
from schemagraph.model.keyword_values import LimitKeyword, Number
from schemagraph.validation.base import InstanceNode, KeywordValidator
from schemagraph.validation.report import ValidationReport


def _is_finite(value: Number) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return True


class MultipleOfValidator(KeywordValidator):
    """``multipleOf`` and draft 3 ``divisibleBy``.

    The remainder is computed on exact rationals of the decimal
    representation, so 0.3 is a multiple of 0.01.
    """

    def __init__(self, keyword: KeywordMetadata, schema_location: str, divisor: Number) -> None:
        super().__init__(keyword, schema_location)
        self.divisor = divisor
        self._divisor: Fraction = to_fraction(divisor)

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a number that is not an exact multiple."""
        value = node.value
        if not _is_finite(value) or to_fraction(value) % self._divisor != 0:
            self.fail(node, report, "{} is not a multiple of {}", value, self.divisor)


class MinimumValidator(KeywordValidator):
    """``minimum``, honouring ``exclusiveMinimum`` in both its forms."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, limit: LimitKeyword) -> None:
        super().__init__(keyword, schema_location)
        self.limit = limit

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a number below the lower bound."""
        violation = self.limit.lower_violation(node.value)
        if violation is None:
            return
        bound, exclusive = violation
        if exclusive:
            self.fail(node, report, "{} is less than or equal to the exclusive minimum {}", node.value, bound)
        else:
            self.fail(node, report, "{} is less than the minimum {}", node.value, bound)


class MaximumValidator(KeywordValidator):
    """``maximum``, honouring ``exclusiveMaximum`` in both its forms."""

    def __init__(self, keyword: KeywordMetadata, schema_location: str, limit: LimitKeyword) -> None:
        super().__init__(keyword, schema_location)
        self.limit = limit

    def validate(self, node: InstanceNode, report: ValidationReport) -> None:
        """Report a number above the upper bound."""
        violation = self.limit.upper_violation(node.value)
        if violation is None:
            return
        bound, exclusive = violation
        if exclusive:
            self.fail(node, report, "{} is greater than or equal to the exclusive maximum {}", node.value, bound)
        else:
            self.fail(node, report, "{} is greater than the maximum {}", node.value, bound)
