"""Named "format" checkers.

The table maps a format name to a checker that parses the value and to the
set of simple types the format may be declared on. It is read-only; unknown
format names are simply absent and never reported as invalid.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Any

import httpx

from schemakit.simple_types import SimpleType

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"\d{2}:\d{2}(:\d{2}(\.\d{1,9})?)?")
_DATE_TIME_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}(:\d{2}(\.\d{1,9})?)?([Zz]|[+-]\d{2}:\d{2})"
)
# RFC 3986 unreserved, reserved and percent characters
_URI_CHARS_RE = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*")


@dataclass(frozen=True)
class FormatChecker:
    """A format's value check and the types it can be declared on.

    Attributes:
        name: Format name as written in schemas (e.g. "date-time").
        check: Returns True if the value is a valid instance of the format.
        compatible_types: Simple types the format is legal for.
    """

    name: str
    check: Callable[[Any], bool]
    compatible_types: frozenset[SimpleType]

    def is_compatible_type(self, simple_type: SimpleType) -> bool:
        return simple_type in self.compatible_types


def _is_date_time(value: Any) -> bool:
    if not _DATE_TIME_RE.fullmatch(value):
        return False
    text = _fraction_to_micros(value.upper())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return False
    return parsed.tzinfo is not None


def _is_date(value: Any) -> bool:
    if not _DATE_RE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_time(value: Any) -> bool:
    if not _TIME_RE.fullmatch(value):
        return False
    try:
        time.fromisoformat(_fraction_to_micros(value))
    except ValueError:
        return False
    return True


def _is_regex(value: Any) -> bool:
    try:
        re.compile(value)
    except re.error:
        return False
    return True


def _is_uri(value: Any) -> bool:
    if not _URI_CHARS_RE.fullmatch(value):
        return False
    try:
        httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return True


def _always_valid(value: Any) -> bool:
    return True


def _fraction_to_micros(value: str) -> str:
    """Trim or pad a fractional seconds part to the six digits fromisoformat reads."""
    match = re.search(r"\.(\d+)", value)
    if not match:
        return value
    digits = match.group(1)[:6].ljust(6, "0")
    return value[: match.start(1)] + digits + value[match.end(1) :]


_STRING_ONLY = frozenset({SimpleType.STRING})

FORMATS: Mapping[str, FormatChecker] = MappingProxyType(
    {
        checker.name: checker
        for checker in (
            FormatChecker("date-time", _is_date_time, _STRING_ONLY),
            FormatChecker("date", _is_date, _STRING_ONLY),
            FormatChecker("time", _is_time, _STRING_ONLY),
            FormatChecker("regex", _is_regex, _STRING_ONLY),
            FormatChecker("uri", _is_uri, _STRING_ONLY),
            FormatChecker(
                "utc-millisec",
                _always_valid,
                frozenset({SimpleType.INTEGER, SimpleType.NUMBER}),
            ),
        )
    }
)


def get_format(name: str | None) -> FormatChecker | None:
    """Return the checker for a format name, or None if it isn't known."""
    if name is None:
        return None
    return FORMATS.get(name)
