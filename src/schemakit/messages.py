"""Located validation error messages.

An ErrorMessage pairs a document path with a human-readable message:
    {"location": "foo.bar[2]", "message": "Invalid type: must be of type string"}

Nested validators report locations relative to the value they were given;
parents re-prefix them with the property name or array index that led there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ErrorMessage:
    """Single validation finding.

    Attributes:
        location: Dotted/bracketed path to the offending value ("" for the root).
        message: Human-readable description of the problem.
    """

    location: str
    message: str

    @classmethod
    def nested(cls, prefix: str, child: ErrorMessage) -> ErrorMessage:
        """Re-locate a nested message under a parent path segment.

        No separator is inserted when the child location is empty or starts
        with an array index.
        """
        separator = "." if child._separator_needed() else ""
        return cls(location=f"{prefix}{separator}{child.location}", message=child.message)

    def _separator_needed(self) -> bool:
        return self.location != "" and not self.location.startswith("[")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"location": self.location, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorMessage:
        return cls(location=data.get("location", ""), message=data.get("message", ""))

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


def single_error(location: str, message: str) -> list[ErrorMessage]:
    """Build a one-element error list."""
    return [ErrorMessage(location, message)]


def prefix_errors(prefix: str, errors: list[ErrorMessage]) -> list[ErrorMessage]:
    """Re-locate every message in errors under prefix."""
    return [ErrorMessage.nested(prefix, e) for e in errors]
