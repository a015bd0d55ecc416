"""Input/output handling utilities."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from schemakit.fetch import parse_json
from schemakit.messages import ErrorMessage
from schemakit.simple_types import to_decimal

_YAML_SUFFIXES = (".yaml", ".yml")


def read_input(source: str) -> Any:
    """Read a document from a file path or inline JSON string.

    JSON numbers with a fraction part are kept as Decimal. Files ending in
    .yaml/.yml are read as YAML.

    Args:
        source: Either a path to a JSON/YAML file, or an inline JSON string.

    Returns:
        The parsed document.

    Raises:
        json.JSONDecodeError: If the input is not valid JSON.
        yaml.YAMLError: If a YAML file is not valid YAML.
        UnicodeDecodeError: If a file is not UTF-8.
        OSError: If a file exists but can't be read.
    """
    # Inline objects/arrays can be longer than the OS allows for a path
    if source.lstrip().startswith(("{", "[")):
        return parse_json(source)

    # Check if source looks like a file path and exists
    source_path = Path(source)
    if source_path.is_file():
        text = source_path.read_text(encoding="utf-8")
        if source_path.suffix.lower() in _YAML_SUFFIXES:
            return _normalize_yaml(yaml.safe_load(text))
        return parse_json(text)

    # Otherwise, treat as inline JSON
    return parse_json(source)


def build_report(
    errors: list[ErrorMessage], *, schema_location: str | None = None
) -> dict[str, Any]:
    """Build the JSON report for a validation run."""
    report: dict[str, Any] = {"valid": not errors, "errors": [e.to_dict() for e in errors]}
    if schema_location:
        report["schema"] = schema_location
    return report


def write_output(dest: str | Path, obj: Any) -> None:
    """Write output to a JSON file.

    Args:
        dest: Path to write the JSON output.
        obj: The data to serialize as JSON.

    Raises:
        TypeError: If obj is not JSON serializable.
    """
    dest_path = Path(dest)

    # Ensure parent directory exists
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    with open(dest_path, "w") as f:
        json.dump(obj, f, indent=2, default=str)
        f.write("\n")  # Trailing newline for POSIX compliance


def _normalize_yaml(value: Any) -> Any:
    """Make YAML scalars look like parsed JSON.

    Floats become Decimal and implicit timestamps go back to ISO strings.
    """
    if isinstance(value, float):
        return to_decimal(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _normalize_yaml(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_yaml(v) for v in value]
    return value
