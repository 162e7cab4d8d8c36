"""FormatRegistry: format name -> predicate used by the ``format`` keyword."""

import logging
import re
from collections.abc import Callable

from jsonschema import Draft3Validator, FormatChecker

logger = logging.getLogger(__name__)

FormatPredicate = Callable[[str], bool]

_PHONE_SEPARATORS = re.compile(r"[\s\-.()]")
_PHONE_DIGITS = re.compile(r"\+?[0-9]{7,15}")


def is_phone(value: str) -> bool:
    """International phone number: optional '+', 7 to 15 digits, common separators."""
    return bool(_PHONE_DIGITS.fullmatch(_PHONE_SEPARATORS.sub("", value)))


class FormatRegistry:
    """Registry of format predicates.

    Provides:
    - The format checks of ``jsonschema`` (all drafts, draft 3 names included)
    - Registration of custom formats by name
    - Lookup returning None for unknown names, which validation ignores
    """

    def __init__(self) -> None:
        # Storage: {name: predicate}
        self._formats: dict[str, FormatPredicate] = {}

    @classmethod
    def default(cls) -> "FormatRegistry":
        """Registry with every format ``jsonschema`` can check, plus ``phone``."""
        registry = cls()
        for checker in (FormatChecker(), Draft3Validator.FORMAT_CHECKER):
            for name in checker.checkers:
                if name not in registry:
                    registry.register(name, _conforms(checker, name))
        if "phone" not in registry:
            registry.register("phone", is_phone)
        logger.debug(f"Format registry ready with {len(registry._formats)} formats")
        return registry

    def register(self, name: str, predicate: FormatPredicate) -> None:
        """Register a format predicate.

        Raises:
            ValueError: If a format with the same name is already registered
        """
        if name in self._formats:
            raise ValueError(f"Format '{name}' already registered")
        self._formats[name] = predicate

    def lookup(self, name: str) -> FormatPredicate | None:
        return self._formats.get(name)

    def list_formats(self) -> list[str]:
        return sorted(self._formats)

    def __contains__(self, name: object) -> bool:
        return name in self._formats


def _conforms(checker: FormatChecker, name: str) -> FormatPredicate:
    def predicate(value: str) -> bool:
        return checker.conforms(value, name)

    return predicate
