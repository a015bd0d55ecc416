"""Typed exceptions for schemakit.

Two families are kept apart:
- Schema problems (compile, configuration, fetch, lookup) are raised.
- Document problems are returned as ErrorMessage lists and only become an
  exception through validate_or_raise (DocumentValidationError).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schemakit.messages import ErrorMessage


class SchemakitError(Exception):
    """Base exception for all schemakit errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class SchemaCompileError(SchemakitError):
    """A schema could not be compiled.

    Raised for unreachable locations, invalid JSON, non-object schemas,
    unknown types, malformed $ref values and invalid keyword combinations.
    No partial schema graph is ever registered when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        location: str | None = None,
        problems: list[str] | None = None,
    ):
        context: dict[str, Any] = {}
        if location:
            context["location"] = location
        super().__init__(message, context=context)
        self.location = location
        self.problems = problems or []


class SchemaConfigurationError(SchemakitError, ValueError):
    """A schema node was built with an inconsistent combination of keywords."""

    def __init__(self, message: str, *, field: str | None = None):
        context = {"field": field} if field else {}
        super().__init__(message, context=context)
        self.field = field


class FetchError(SchemakitError):
    """A schema document could not be retrieved."""

    def __init__(self, message: str, *, url: str | None = None):
        context = {"url": url} if url else {}
        super().__init__(message, context=context)
        self.url = url


class HTTPError(FetchError):
    """HTTP request failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        method: str = "GET",
    ):
        super().__init__(message, url=url)
        if status_code is not None:
            self.context["status_code"] = status_code
        self.context["method"] = method
        self.status_code = status_code
        self.method = method


class TimeoutError(FetchError):
    """Schema retrieval timed out."""

    def __init__(
        self, message: str, *, url: str | None = None, timeout_seconds: float | None = None
    ):
        super().__init__(message, url=url)
        if timeout_seconds:
            self.context["timeout_seconds"] = timeout_seconds
        self.timeout_seconds = timeout_seconds


class SchemaNotFoundError(SchemakitError):
    """Raised when a schema name can't be resolved to a location."""

    def __init__(self, name: str, *, searched: str | None = None):
        context = {"searched": searched} if searched else {}
        super().__init__(f"Schema '{name}' was not found", context=context)
        self.name = name
        self.searched = searched


class DocumentValidationError(SchemakitError):
    """A document failed validation.

    Carries the full list of located error messages so that a transport
    adapter can render them (for example as a 400 response body).
    """

    def __init__(self, errors: list[ErrorMessage], *, schema_location: str | None = None):
        context = {"schema_location": schema_location} if schema_location else {}
        super().__init__(
            f"Document validation failed with {len(errors)} error(s)", context=context
        )
        self.errors = errors
        self.schema_location = schema_location

    def to_dict(self) -> dict[str, Any]:
        """Convert to the body a transport adapter serializes."""
        return {"validationErrors": [e.to_dict() for e in self.errors]}
