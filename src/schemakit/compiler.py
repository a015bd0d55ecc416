"""Schema compiler - turns raw schema documents into schema node graphs.

Compilation works through a FIFO worklist of (location, raw document)
pairs. Every $ref met while compiling is resolved against the referencing
document's location, scheduled unless already cached or scheduled, and
replaced by a SchemaReference placeholder. Once the worklist is drained the
whole batch is registered in the cache, so mutually referential documents
can all resolve each other by the time any of them is used.
"""

from __future__ import annotations

import json
import logging
import posixpath
import re
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlsplit, urlunsplit

from schemakit.errors import FetchError, SchemaCompileError, SchemaConfigurationError
from schemakit.fetch import SUPPORTED_SCHEMES
from schemakit.metaschema import check_schema_document
from schemakit.nodes import (
    ALLOW_ALL_ADDITIONAL_PROPERTIES,
    FORBID_ANY_ADDITIONAL_PROPERTIES,
    ArraySchema,
    JsonSchema,
    ObjectSchema,
    Property,
    SchemaReference,
    SimpleTypeSchema,
    UnionSchema,
)
from schemakit.simple_types import SimpleType

if TYPE_CHECKING:
    from schemakit.cache import SchemaCache
    from schemakit.fetch import SchemaFetcher

logger = logging.getLogger(__name__)


def normalize_location(location: str | Path) -> str:
    """Normalize a schema location to the absolute URL used as its identity.

    Filesystem paths become file:// URIs; URLs get a lower-case scheme, lose
    their dot segments and an empty fragment.
    """
    if isinstance(location, Path):
        return location.resolve().as_uri()
    parts = urlsplit(location)
    # A one-letter scheme is a Windows drive, not a URL
    if len(parts.scheme) <= 1:
        return Path(location).resolve().as_uri()
    path = _collapse_dots(parts.path)
    return urlunsplit((parts.scheme.lower(), parts.netloc, path, parts.query, parts.fragment))


def _collapse_dots(path: str) -> str:
    if not any(segment in (".", "..") for segment in path.split("/")):
        return path
    collapsed = posixpath.normpath(path)
    # "a/" and "a/.." both name a directory
    if path.rsplit("/", 1)[-1] in ("", ".", "..") and not collapsed.endswith("/"):
        collapsed += "/"
    return collapsed


def resolve_reference(base_location: str, ref: Any) -> str:
    """Resolve a $ref value against the location of the schema containing it.

    Raises:
        SchemaCompileError: If the reference can't be turned into a
            supported absolute location.
    """
    if not isinstance(ref, str):
        raise SchemaCompileError(
            f"The schema reference {ref!r} is malformed: $ref must be a string",
            location=base_location,
        )
    try:
        parts = urlsplit(urljoin(base_location, ref))
        parts.port  # raises ValueError for an out-of-range port
    except ValueError as e:
        raise SchemaCompileError(
            f"The schema reference '{ref}' is malformed", location=base_location
        ) from e

    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise SchemaCompileError(
            f"The schema reference '{ref}' is malformed: unsupported scheme '{parts.scheme}'",
            location=base_location,
        )
    if parts.fragment:
        raise SchemaCompileError(
            f"The schema reference '{ref}' is malformed: fragments are not supported",
            location=base_location,
        )
    return normalize_location(urlunsplit(parts))


@dataclass(frozen=True)
class _PendingSchema:
    location: str
    raw_schema: Any


class SchemaCompiler:
    """Compiles the schema at a location and every schema it references.

    A compiler is cheap and meant to be used for a single compile() call;
    SchemaCache creates a fresh one whenever it misses.
    """

    def __init__(self, cache: SchemaCache, fetcher: SchemaFetcher) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._worklist: deque[_PendingSchema] = deque()
        self._scheduled: set[str] = set()

    def compile(self, location: str | Path) -> JsonSchema:
        """Compile the schema at location and register it with the cache.

        Args:
            location: Path or absolute URL of the schema document.

        Returns:
            The node registered for location. If another thread registered
            the same location first, that node is returned.

        Raises:
            SchemaCompileError: If this schema or any schema it references
                can't be retrieved, parsed or compiled. Nothing is registered.
        """
        location = normalize_location(location)
        compiled: list[tuple[str, JsonSchema]] = []

        self._schedule(location)
        while self._worklist:
            pending = self._worklist.popleft()
            compiled.append((pending.location, self._compile_document(pending)))

        for schema_location, schema in compiled:
            self._cache.register_schema(schema_location, schema)
        if compiled:
            logger.debug(f"Registered {len(compiled)} compiled schema(s) for {location}")

        return self._cache.get_schema(location)

    def _schedule(self, location: str) -> None:
        if self._cache.has_schema(location) or location in self._scheduled:
            return

        try:
            raw_schema = self._fetcher.fetch(location)
        except json.JSONDecodeError as e:
            raise SchemaCompileError(
                f"The schema at location {location} contains invalid JSON: {e}",
                location=location,
            ) from e
        except FetchError as e:
            raise SchemaCompileError(
                f"Could not retrieve schema from {location}: {e.message}", location=location
            ) from e

        self._scheduled.add(location)
        self._worklist.append(_PendingSchema(location, raw_schema))
        logger.debug(f"Scheduled schema {location} for compilation")

    def _compile_document(self, pending: _PendingSchema) -> JsonSchema:
        if not isinstance(pending.raw_schema, dict):
            raise SchemaCompileError(
                "A valid json schema must be an object", location=pending.location
            )
        check_schema_document(pending.raw_schema, pending.location)
        return self._parse(pending.raw_schema, pending.location)

    def _parse(self, raw_schema: Any, location: str) -> JsonSchema:
        if not isinstance(raw_schema, dict):
            raise SchemaCompileError("A valid json schema must be an object", location=location)

        if "$ref" in raw_schema:
            referenced_location = resolve_reference(location, raw_schema["$ref"])
            self._schedule(referenced_location)
            return SchemaReference(self._cache, referenced_location)

        schema_type = raw_schema.get("type", SimpleType.ANY.value)
        try:
            if isinstance(schema_type, list):
                return self._parse_union(schema_type, location)
            return self._parse_typed(raw_schema, schema_type, location)
        except SchemaConfigurationError as e:
            raise SchemaCompileError(
                f"Invalid schema at {location}: {e.message}", location=location
            ) from e

    def _parse_typed(
        self, raw_schema: dict[str, Any], schema_type: Any, location: str
    ) -> JsonSchema:
        type_name = schema_type.lower() if isinstance(schema_type, str) else schema_type
        simple_type = SimpleType.from_name(type_name) if isinstance(type_name, str) else None
        if simple_type is not None:
            return self._parse_simple(raw_schema, simple_type, location)
        if type_name == "object":
            return self._parse_object(raw_schema, location)
        if type_name == "array":
            return self._parse_array(raw_schema, location)
        raise SchemaCompileError(f"Illegal schema type {schema_type}", location=location)

    def _parse_union(self, entries: list[Any], location: str) -> UnionSchema:
        if not entries:
            raise SchemaCompileError("A union type must list at least one type", location=location)
        nested: list[JsonSchema] = []
        for entry in entries:
            if isinstance(entry, dict):
                nested.append(self._parse(entry, location))
            else:
                nested.append(self._parse_typed({}, entry, location))
        return UnionSchema(tuple(nested))

    def _parse_simple(
        self, raw_schema: dict[str, Any], simple_type: SimpleType, location: str
    ) -> SimpleTypeSchema:
        pattern = raw_schema.get("pattern")
        compiled_pattern = None
        if pattern is not None:
            try:
                compiled_pattern = re.compile(pattern)
            except re.error as e:
                raise SchemaCompileError(
                    f"Invalid regex pattern '{pattern}': {e}", location=location
                ) from e

        return SimpleTypeSchema(
            type=simple_type,
            pattern=compiled_pattern,
            format=raw_schema.get("format"),
            min_length=raw_schema.get("minLength"),
            max_length=raw_schema.get("maxLength"),
            minimum=raw_schema.get("minimum"),
            maximum=raw_schema.get("maximum"),
            exclusive_minimum=raw_schema.get("exclusiveMinimum"),
            exclusive_maximum=raw_schema.get("exclusiveMaximum"),
            enumeration=raw_schema.get("enumeration"),
        )

    def _parse_object(self, raw_schema: dict[str, Any], location: str) -> ObjectSchema:
        raw_additional = raw_schema.get("additionalProperties")
        if raw_additional is None or raw_additional is True:
            additional_properties: JsonSchema = ALLOW_ALL_ADDITIONAL_PROPERTIES
        elif raw_additional is False:
            additional_properties = FORBID_ANY_ADDITIONAL_PROPERTIES
        else:
            additional_properties = self._parse(raw_additional, location)

        properties = []
        for name, raw_nested in raw_schema.get("properties", {}).items():
            nested_schema = self._parse(raw_nested, location)
            properties.append(
                Property(
                    name=name,
                    nested_schema=nested_schema,
                    required=raw_nested.get("required", False),
                )
            )

        return ObjectSchema(
            properties=tuple(properties), additional_properties=additional_properties
        )

    def _parse_array(self, raw_schema: dict[str, Any], location: str) -> ArraySchema:
        if "items" in raw_schema:
            items = self._parse(raw_schema["items"], location)
        else:
            items = SimpleTypeSchema()
        return ArraySchema(
            items=items,
            min_items=raw_schema.get("minItems", 0),
            max_items=raw_schema.get("maxItems", 0),
        )
