"""Tests for the schemakit command line."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console
from typer.testing import CliRunner

from schemakit import cli
from schemakit.cli import (
    EXIT_ERROR,
    EXIT_INVALID_DOCUMENT,
    EXIT_SUCCESS,
    app,
    resolve_schema_location,
)
from schemakit.errors import SchemaNotFoundError

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch) -> None:
    """Keep rich from wrapping long file URIs in the captured output."""
    monkeypatch.setattr(cli, "console", Console(width=400))
    for var in ("SCHEMAKIT_HTTP_TIMEOUT", "SCHEMAKIT_SCHEMAS_ROOT", "SCHEMAKIT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def order_schema(write_schema, sample_order_schema) -> str:
    return write_schema("order.json", sample_order_schema)


class TestResolveSchemaLocation:
    """Tests for turning the --schema argument into a location."""

    def test_url_is_used_as_given(self, tmp_path: Path) -> None:
        url = "https://schemas.example.com/order.json"
        assert resolve_schema_location(url, tmp_path) == url

    def test_existing_path(self, schema_dir: Path, write_schema) -> None:
        location = write_schema("order.json", {})
        assert resolve_schema_location(str(schema_dir / "order.json"), "unused") == location

    def test_name_under_root(self, schema_dir: Path, write_schema) -> None:
        location = write_schema("orders/create.json", {})
        assert resolve_schema_location("orders/create.json", schema_dir) == location

    def test_unknown_name(self, schema_dir: Path) -> None:
        with pytest.raises(SchemaNotFoundError):
            resolve_schema_location("nope.json", schema_dir)


class TestValidateCommand:
    """Tests for `schemakit validate`."""

    def test_valid_document(self, order_schema: str) -> None:
        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", '{"id": "A-1"}'])

        assert result.exit_code == EXIT_SUCCESS
        assert "Document is valid" in result.stdout

    def test_invalid_document(self, order_schema: str) -> None:
        result = runner.invoke(
            app, ["validate", "--schema", order_schema, "--input", '{"status": "lost", "x": 1}']
        )

        assert result.exit_code == EXIT_INVALID_DOCUMENT
        assert "Validation Errors (3)" in result.stdout
        assert "Missing required property id" in result.stdout
        assert 'Value "lost" must be one of: ["open", "closed"]' in result.stdout
        assert "Unexpected property" in result.stdout

    def test_writes_report(self, order_schema: str, tmp_path: Path) -> None:
        report_path = tmp_path / "reports" / "result.json"

        result = runner.invoke(
            app,
            ["validate", "-s", order_schema, "-i", '{"id": "bad"}', "-o", str(report_path)],
        )

        assert result.exit_code == EXIT_INVALID_DOCUMENT
        report = json.loads(report_path.read_text())
        assert report == {
            "valid": False,
            "errors": [
                {
                    "location": "id",
                    "message": "String value 'bad' does not match regex '[A-Z]-\\d+'",
                }
            ],
            "schema": order_schema,
        }

    def test_writes_report_for_valid_document(self, order_schema: str, tmp_path: Path) -> None:
        report_path = tmp_path / "result.json"

        result = runner.invoke(
            app, ["validate", "-s", order_schema, "-i", '{"id": "A-2"}', "-o", str(report_path)]
        )

        assert result.exit_code == EXIT_SUCCESS
        assert json.loads(report_path.read_text())["valid"] is True

    def test_document_file(self, order_schema: str, tmp_path: Path) -> None:
        document = tmp_path / "order.yaml"
        document.write_text("id: A-3\nquantity: 0\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", str(document)])

        assert result.exit_code == EXIT_INVALID_DOCUMENT
        assert "Value '0' must be greater or equal to 1" in result.stdout

    def test_schema_by_name(self, schema_dir: Path, order_schema: str) -> None:
        result = runner.invoke(
            app,
            ["validate", "-s", "order.json", "--schemas", str(schema_dir), "-i", '{"id": "B-9"}'],
        )

        assert result.exit_code == EXIT_SUCCESS

    def test_schemas_root_from_env(self, schema_dir: Path, order_schema: str, monkeypatch) -> None:
        monkeypatch.setenv("SCHEMAKIT_SCHEMAS_ROOT", str(schema_dir))

        result = runner.invoke(app, ["validate", "-s", "order.json", "-i", '{"id": "B-9"}'])

        assert result.exit_code == EXIT_SUCCESS

    def test_unknown_schema_name(self, schema_dir: Path) -> None:
        result = runner.invoke(
            app, ["validate", "-s", "nope.json", "--schemas", str(schema_dir), "-i", "{}"]
        )

        assert result.exit_code == EXIT_ERROR
        assert "Schema 'nope.json' was not found" in result.stdout

    def test_schema_compile_error(self, write_schema) -> None:
        location = write_schema("bad.json", {"type": "strng"})

        result = runner.invoke(app, ["validate", "-s", location, "-i", "{}"])

        assert result.exit_code == EXIT_ERROR
        assert "Schema Error" in result.stdout
        assert "Illegal schema type strng" in result.stdout

    def test_malformed_schema_lists_problems(self, write_schema) -> None:
        location = write_schema("bad.json", {"type": "string", "minLength": "ten"})

        result = runner.invoke(app, ["validate", "-s", location, "-i", '"x"'])

        assert result.exit_code == EXIT_ERROR
        assert "• At 'minLength': 'ten' is not of type 'integer'" in result.stdout

    def test_invalid_input(self, order_schema: str) -> None:
        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", "{oops"])

        assert result.exit_code == EXIT_ERROR
        assert "Input Error" in result.stdout

    def test_input_file_that_is_not_utf8(self, order_schema: str, tmp_path: Path) -> None:
        document = tmp_path / "order.json"
        document.write_bytes(b'{"id": "\xff"}')

        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", str(document)])

        assert result.exit_code == EXIT_ERROR
        assert "Input Error" in result.stdout

    def test_unreadable_input_file(self, order_schema: str, monkeypatch) -> None:
        monkeypatch.setattr(cli, "read_input", MagicMock(side_effect=PermissionError("denied")))

        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", "order.json"])

        assert result.exit_code == EXIT_ERROR
        assert "Input Error: denied" in result.stdout

    def test_non_json_constant_input(self, order_schema: str) -> None:
        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", "NaN"])

        assert result.exit_code == EXIT_ERROR
        assert "Invalid JSON constant NaN" in result.stdout

    def test_invalid_environment(self, order_schema: str, monkeypatch) -> None:
        monkeypatch.setenv("SCHEMAKIT_HTTP_TIMEOUT", "never")

        result = runner.invoke(app, ["validate", "-s", order_schema, "-i", "{}"])

        assert result.exit_code == EXIT_ERROR
        assert "Configuration Error" in result.stdout


class TestCheckCommand:
    """Tests for `schemakit check`."""

    def test_lists_compiled_documents(self, write_schema) -> None:
        write_schema("address.json", {"type": "object"})
        location = write_schema(
            "order.json", {"type": ["null", {"$ref": "address.json"}]}
        )

        result = runner.invoke(app, ["check", "-s", location])

        assert result.exit_code == EXIT_SUCCESS
        assert "Compiled Schemas" in result.stdout
        assert "address.json" in result.stdout
        assert "union" in result.stdout
        assert "Schema compiled (2 document(s))" in result.stdout

    def test_compile_error(self, write_schema) -> None:
        location = write_schema("order.json", {"$ref": "missing.json"})

        result = runner.invoke(app, ["check", "-s", location])

        assert result.exit_code == EXIT_ERROR
        assert "Could not retrieve schema" in result.stdout


class TestFormatsCommand:
    """Tests for `schemakit formats`."""

    def test_lists_formats(self) -> None:
        result = runner.invoke(app, ["formats"])

        assert result.exit_code == EXIT_SUCCESS
        for name in ("date-time", "date", "time", "regex", "uri", "utc-millisec"):
            assert name in result.stdout
        assert "integer, number" in result.stdout


class TestApp:
    """Tests for the app itself."""

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == EXIT_SUCCESS
        assert "validate" in result.stdout
        assert "check" in result.stdout
