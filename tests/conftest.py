"""Pytest fixtures for schemakit tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from schemakit.cache import SchemaCache
from schemakit.fetch import SchemaFetcher

WriteSchema = Callable[..., str]


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    """Directory that test schemas are written into."""
    directory = tmp_path / "schemas"
    directory.mkdir()
    return directory


@pytest.fixture
def write_schema(schema_dir: Path) -> WriteSchema:
    """Write a schema document and return its file:// location.

    Dicts are serialized as JSON; strings are written verbatim so tests can
    store malformed documents.
    """

    def _write(name: str, content: dict[str, Any] | list[Any] | str) -> str:
        path = schema_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path.resolve().as_uri()

    return _write


@pytest.fixture
def cache() -> Iterator[SchemaCache]:
    """A fresh cache that reads schemas from disk."""
    schema_cache = SchemaCache(SchemaFetcher())
    yield schema_cache
    schema_cache.close()


@pytest.fixture
def sample_order_schema() -> dict[str, Any]:
    """An order schema exercising most keywords."""
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string", "required": True, "pattern": "[A-Z]-\\d+"},
            "placed": {"type": "string", "format": "date-time"},
            "quantity": {"type": "integer", "minimum": 1, "maximum": 100},
            "status": {"type": "string", "enumeration": ["open", "closed"]},
            "tags": {"type": "array", "maxItems": 3, "items": {"type": "string"}},
        },
        "additionalProperties": False,
    }
