"""Shape checks for raw schema documents.

Before a fetched document is compiled it is checked against a bundled
meta-schema that pins down the value shape of every supported keyword
(minLength must be an integer, exclusiveMinimum a boolean, and so on).
Semantic rules such as "pattern only for strings" are left to the nodes.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema
from jsonschema import Draft202012Validator

from schemakit.errors import SchemaCompileError

METASCHEMA_RESOURCE = "metaschema.json"


@lru_cache(maxsize=1)
def load_metaschema() -> dict[str, Any]:
    """Load the bundled meta-schema.

    Returns:
        The parsed meta-schema as a dictionary.
    """
    text = resources.files("schemakit").joinpath("data", METASCHEMA_RESOURCE).read_text("utf-8")
    return json.loads(text)


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(load_metaschema())


def schema_problems(raw_schema: Any) -> list[str]:
    """Return a readable description of every keyword shape problem."""
    errors = sorted(
        _validator().iter_errors(raw_schema), key=lambda e: [str(p) for p in e.absolute_path]
    )
    return [_format_validation_error(e) for e in errors]


def check_schema_document(raw_schema: Any, location: str) -> None:
    """Check a raw schema document's keyword shapes.

    Args:
        raw_schema: The parsed schema document.
        location: Where the document came from, for error reporting.

    Raises:
        SchemaCompileError: If any keyword has a value of the wrong shape.
    """
    problems = schema_problems(raw_schema)
    if problems:
        raise SchemaCompileError(
            f"The schema at location {location} is malformed: {'; '.join(problems)}",
            location=location,
            problems=problems,
        )


def _format_validation_error(error: jsonschema.ValidationError) -> str:
    """Format a validation error into a human-readable string."""
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    return f"At '{path}': {error.message}"
