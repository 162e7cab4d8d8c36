"""Helpers over the native JSON value tree (dict/list/str/int/float/bool/None).

Covers JSON Pointer parsing and rendering (on top of ``jsonpointer``),
shape/type detection, and JSON equality, where numbers compare by value,
booleans never equal numbers and object key order is irrelevant.
"""

import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from fractions import Fraction
from typing import Any
from urllib.parse import unquote

import jsonpointer

from schemagraph.keywords.metadata import JsonSchemaType, JsonShape

JsonPointer = tuple[str, ...]

ROOT_POINTER: JsonPointer = ()

# RFC 6901 array index: no leading zeros, ASCII digits only.
_ARRAY_INDEX = re.compile(r"0|[1-9][0-9]*")


class JsonPointerError(LookupError):
    """Raised when a JSON Pointer cannot be resolved or parsed.

    Attributes:
        pointer: The pointer being resolved
        segment: The segment that failed, if any
    """

    def __init__(self, pointer: str, segment: str | None = None, reason: str = "") -> None:
        detail = f" at segment '{segment}'" if segment is not None else ""
        super().__init__(f"Unable to resolve JSON Pointer '{pointer}'{detail}{': ' + reason if reason else ''}")
        self.pointer = pointer
        self.segment = segment


def escape_segment(segment: str) -> str:
    return jsonpointer.escape(segment)


def parse_pointer(text: str) -> JsonPointer:
    """Parse a JSON Pointer string (``/a/b~1c``) into unescaped segments.

    Raises:
        JsonPointerError: If a non-empty pointer does not start with '/', or
            holds an invalid ``~`` escape
    """
    try:
        return tuple(jsonpointer.JsonPointer(text).parts)
    except jsonpointer.JsonPointerException as e:
        raise JsonPointerError(text, reason=str(e)) from e


def parse_fragment(fragment: str) -> JsonPointer:
    """Parse a percent-encoded URI fragment holding a JSON Pointer.

    The fragment is decoded exactly once, here; URIs and cache keys keep it
    encoded.
    """
    return parse_pointer(unquote(fragment.lstrip("#")))


def to_pointer_text(pointer: Sequence[str]) -> str:
    return jsonpointer.JsonPointer.from_parts([str(segment) for segment in pointer]).path


def resolve_pointer(document: Any, pointer: Sequence[str]) -> Any:
    """Walk ``document`` along ``pointer``.

    Array indexes follow RFC 6901: ASCII digits without leading zeros; the
    ``-`` (past the end) index never resolves.

    Raises:
        JsonPointerError: If a segment names no member or index
    """
    json_pointer = jsonpointer.JsonPointer.from_parts([str(segment) for segment in pointer])
    node = document
    for segment in json_pointer.parts:
        if not isinstance(node, (Mapping, list)):
            raise JsonPointerError(json_pointer.path, segment, "not a container")
        if isinstance(node, list) and not _ARRAY_INDEX.fullmatch(segment):
            raise JsonPointerError(json_pointer.path, segment, "not an array index")
        try:
            node = json_pointer.walk(node, segment)
        except jsonpointer.JsonPointerException as e:
            raise JsonPointerError(json_pointer.path, segment, str(e)) from e
    return node


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_integral(value: Any) -> bool:
    """Whether a number has no fractional part (``1.0`` is integral)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return False


def shape_of(value: Any) -> JsonShape:
    if value is None:
        return JsonShape.NULL
    if isinstance(value, bool):
        return JsonShape.BOOLEAN
    if is_number(value):
        return JsonShape.NUMBER
    if isinstance(value, str):
        return JsonShape.STRING
    if isinstance(value, Mapping):
        return JsonShape.OBJECT
    if isinstance(value, (list, tuple)):
        return JsonShape.ARRAY
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def instance_type_of(value: Any) -> JsonSchemaType:
    """JSON Schema type of an instance; integral numbers report ``INTEGER``."""
    shape = shape_of(value)
    if shape is JsonShape.NUMBER:
        return JsonSchemaType.INTEGER if is_integral(value) else JsonSchemaType.NUMBER
    return JsonSchemaType(shape.value)


def to_fraction(value: int | float | Decimal) -> Fraction:
    """Exact rational value of a number's decimal representation.

    Floats go through ``repr`` so that ``0.1`` becomes exactly 1/10, not the
    nearest binary fraction.
    """
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def freeze(value: Any) -> Any:
    """Hashable form of a JSON value, consistent with ``json_equals``."""
    if isinstance(value, bool) or value is None:
        return ("literal", value)
    if is_number(value):
        return ("number", value)
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, Mapping):
        return ("object", frozenset((key, freeze(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple)):
        return ("array", tuple(freeze(item) for item in value))
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def json_equals(left: Any, right: Any) -> bool:
    """Structural JSON equality."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(json_equals(item, right[key]) for key, item in left.items())
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equals(a, b) for a, b in zip(left, right))
    if type(left) is not type(right):
        return False
    return left == right
