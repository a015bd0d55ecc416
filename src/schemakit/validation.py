"""Validator entry points.

validate() is the core call: it walks a compiled schema against a JSON value
and returns every located finding. validate_or_raise() is the form a
transport adapter uses when it wants an exception to map to a 400 response.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from schemakit.cache import SchemaCache
from schemakit.deps import get_default_cache
from schemakit.errors import DocumentValidationError
from schemakit.messages import ErrorMessage
from schemakit.nodes import JsonSchema

logger = logging.getLogger(__name__)


def compile_schema(location: str | Path, *, cache: SchemaCache | None = None) -> JsonSchema:
    """Return the compiled schema for location.

    Args:
        location: Path or absolute URL of the schema document.
        cache: Cache to compile into (defaults to the process-wide cache).

    Raises:
        SchemaCompileError: If the schema can't be compiled.
    """
    return (cache or get_default_cache()).get_schema(location)


def validate(schema: JsonSchema, document: Any) -> list[ErrorMessage]:
    """Validate a document against a compiled schema.

    Args:
        schema: A compiled schema node.
        document: The JSON value to check.

    Returns:
        Every finding, located relative to the document root. An empty list
        means the document is valid.
    """
    return schema.validate(document)


def validate_or_raise(
    schema: JsonSchema, document: Any, *, schema_location: str | None = None
) -> None:
    """Validate a document and raise if it has any findings.

    Raises:
        DocumentValidationError: If validation fails.
    """
    errors = validate(schema, document)
    if errors:
        logger.debug(f"Document failed validation with {len(errors)} error(s)")
        raise DocumentValidationError(errors, schema_location=schema_location)
