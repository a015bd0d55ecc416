"""Command-line interface for compiling schemas and validating documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import urlsplit

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schemakit.config import SchemakitSettings, SettingsError
from schemakit.deps import build_cache
from schemakit.errors import SchemaCompileError, SchemaNotFoundError
from schemakit.formats import FORMATS
from schemakit.io import build_report, read_input, write_output
from schemakit.lookup import DirectorySchemaLookup
from schemakit.validation import validate

app = typer.Typer(
    name="schemakit",
    help="Compile JSON schemas and validate documents against them.",
    no_args_is_help=True,
)

console = Console()

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_DOCUMENT = 2


def _load_settings(verbose: bool) -> SchemakitSettings:
    try:
        settings = SchemakitSettings.from_env()
    except SettingsError as e:
        console.print(f"[red]Configuration Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from None

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level_number,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return settings


def resolve_schema_location(schema: str, schemas_root: str | Path) -> str:
    """Turn a CLI schema argument into a location.

    URLs are used as given, existing paths as paths, and anything else is
    looked up by name under schemas_root.
    """
    if len(urlsplit(schema).scheme) > 1:
        return schema
    if Path(schema).is_file():
        return Path(schema).resolve().as_uri()
    return DirectorySchemaLookup(schemas_root).get_schema_url(schema)


def _schema_location_or_exit(schema: str, schemas_root: str | Path) -> str:
    try:
        return resolve_schema_location(schema, schemas_root)
    except (SchemaNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from None


def _print_compile_error(error: SchemaCompileError) -> None:
    console.print(f"[red]Schema Error:[/red] {escape(str(error))}")
    for problem in error.problems:
        console.print(f"  • {escape(problem)}")


@app.command("validate")
def validate_cmd(
    schema: str = typer.Option(
        ...,
        "--schema",
        "-s",
        help="Schema path, URL, or name under the schemas root",
    ),
    input_source: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path to a JSON/YAML document or an inline JSON string",
    ),
    output_path: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Path to write a JSON validation report",
    ),
    schemas_root: str | None = typer.Option(
        None,
        "--schemas",
        help="Root directory for schema names (default: SCHEMAKIT_SCHEMAS_ROOT or 'schemas')",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Validate a document against a schema.

    Exits 0 when the document is valid, 2 when it has validation errors
    and 1 when the schema or the document can't be loaded.

    Example:
        schemakit validate -s schemas/order.json -i '{"id": "A-1"}'
    """
    settings = _load_settings(verbose)
    location = _schema_location_or_exit(schema, schemas_root or settings.schemas_root)

    try:
        document = read_input(input_source)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError, OSError) as e:
        console.print(f"[red]Input Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from None

    with build_cache(settings) as cache:
        try:
            compiled = cache.get_schema(location)
        except SchemaCompileError as e:
            _print_compile_error(e)
            raise typer.Exit(code=EXIT_ERROR) from None
        errors = validate(compiled, document)

    if output_path:
        write_output(output_path, build_report(errors, schema_location=location))

    if not errors:
        console.print("[green]✓ Document is valid[/green]")
        raise typer.Exit(code=EXIT_SUCCESS)

    table = Table(title=f"Validation Errors ({len(errors)})")
    table.add_column("Location", style="cyan", no_wrap=True)
    table.add_column("Message", style="red")
    for error in errors:
        table.add_row(escape(error.location or "(root)"), escape(error.message))
    console.print(table)
    raise typer.Exit(code=EXIT_INVALID_DOCUMENT)


@app.command("check")
def check_cmd(
    schema: str = typer.Option(
        ...,
        "--schema",
        "-s",
        help="Schema path, URL, or name under the schemas root",
    ),
    schemas_root: str | None = typer.Option(
        None,
        "--schemas",
        help="Root directory for schema names (default: SCHEMAKIT_SCHEMAS_ROOT or 'schemas')",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Compile a schema and every schema it references, without validating anything."""
    settings = _load_settings(verbose)
    location = _schema_location_or_exit(schema, schemas_root or settings.schemas_root)

    with build_cache(settings) as cache:
        try:
            cache.get_schema(location)
        except SchemaCompileError as e:
            _print_compile_error(e)
            raise typer.Exit(code=EXIT_ERROR) from None

        table = Table(title="Compiled Schemas")
        table.add_column("Location", style="cyan")
        table.add_column("Type", style="green")
        for compiled_location in cache.locations():
            description = cache.get_schema(compiled_location).description
            table.add_row(escape(compiled_location), description)

    console.print(table)
    console.print(f"[green]✓ Schema compiled ({len(table.rows)} document(s))[/green]")


@app.command("formats")
def formats_cmd() -> None:
    """List the supported format names."""
    table = Table(title="Supported Formats")
    table.add_column("Format", style="cyan", no_wrap=True)
    table.add_column("Compatible Types", style="green")

    for name, checker in sorted(FORMATS.items()):
        types = ", ".join(sorted(t.value for t in checker.compatible_types))
        table.add_row(name, types)

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
