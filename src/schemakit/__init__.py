"""schemakit: a draft-03 style JSON Schema compiler and validator."""

__version__ = "0.1.0"

from schemakit.cache import SchemaCache
from schemakit.compiler import SchemaCompiler, normalize_location
from schemakit.deps import build_cache, get_default_cache
from schemakit.errors import (
    DocumentValidationError,
    FetchError,
    SchemaCompileError,
    SchemaConfigurationError,
    SchemakitError,
    SchemaNotFoundError,
)
from schemakit.fetch import SchemaFetcher
from schemakit.formats import FORMATS, FormatChecker
from schemakit.lookup import DirectorySchemaLookup, PackageSchemaLookup, SchemaLookup
from schemakit.messages import ErrorMessage
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
from schemakit.validation import compile_schema, validate, validate_or_raise

__all__ = [
    # Entry points
    "compile_schema",
    "validate",
    "validate_or_raise",
    # Compilation and caching
    "SchemaCache",
    "SchemaCompiler",
    "SchemaFetcher",
    "build_cache",
    "get_default_cache",
    "normalize_location",
    # Schema nodes
    "ALLOW_ALL_ADDITIONAL_PROPERTIES",
    "FORBID_ANY_ADDITIONAL_PROPERTIES",
    "ArraySchema",
    "JsonSchema",
    "ObjectSchema",
    "Property",
    "SchemaReference",
    "SimpleType",
    "SimpleTypeSchema",
    "UnionSchema",
    # Formats
    "FORMATS",
    "FormatChecker",
    # Lookups
    "DirectorySchemaLookup",
    "PackageSchemaLookup",
    "SchemaLookup",
    # Messages and errors
    "ErrorMessage",
    "DocumentValidationError",
    "FetchError",
    "SchemaCompileError",
    "SchemaConfigurationError",
    "SchemaNotFoundError",
    "SchemakitError",
]
