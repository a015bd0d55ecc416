"""Primitive JSON kinds and helpers for working with plain JSON values.

JSON documents are handled as ordinary Python trees (dict, list, str, int,
float or Decimal, bool, None). Helpers here hide the awkward corners of that
representation: bool being an int subclass, and float/Decimal comparisons.
"""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any


class SimpleType(str, Enum):
    """Primitive type names accepted by the "type" keyword."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    ANY = "any"

    def matches(self, value: Any) -> bool:
        """Return True if value is of this kind."""
        if self is SimpleType.STRING:
            return isinstance(value, str)
        if self is SimpleType.NUMBER:
            return is_number(value)
        if self is SimpleType.INTEGER:
            return is_integral(value)
        if self is SimpleType.BOOLEAN:
            return isinstance(value, bool)
        if self is SimpleType.NULL:
            return value is None
        return True

    @classmethod
    def from_name(cls, name: str) -> SimpleType | None:
        """Look up a type by its schema name, or None if it isn't a simple type."""
        try:
            return cls(name)
        except ValueError:
            return None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_integral(value: Any) -> bool:
    """Return True for integer literals.

    A literal written with a fraction part (10.0) is not integral, so floats
    never are, and a Decimal only is when its exponent is non-negative.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite() and value.as_tuple().exponent >= 0  # type: ignore[operator]
    return False


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON number to an exact Decimal.

    Floats go through their shortest repr so 0.1 becomes Decimal('0.1').
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def json_equal(a: Any, b: Any) -> bool:
    """Structural equality between two JSON values.

    Numbers compare by decimal value, booleans never equal numbers.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return to_decimal(a) == to_decimal(b)
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(json_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    if type(a) is not type(b):
        return False
    return bool(a == b)


def render_json(value: Any) -> str:
    """Render a JSON value compactly for use inside error messages."""
    return json.dumps(value, default=_encode_decimal, separators=(",", ":"))


def render_value(value: Any) -> str:
    """Textual form of a scalar value, as used in quoted message fragments."""
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _encode_decimal(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if is_integral(value) else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
