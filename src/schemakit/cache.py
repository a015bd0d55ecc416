"""Schema cache - maps schema locations to compiled schemas.

The cache is a pass-through: asking for a location that hasn't been seen
yet compiles it (and everything it references) with a fresh compiler.
Registration is first-writer-wins, so two threads compiling the same
location concurrently both end up handing out the same node.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from schemakit.compiler import SchemaCompiler, normalize_location
from schemakit.fetch import SchemaFetcher
from schemakit.nodes import JsonSchema

logger = logging.getLogger(__name__)

# Builds a compiler bound to the given cache
CompilerFactory = Callable[["SchemaCache"], SchemaCompiler]


def _default_compiler_factory(cache: SchemaCache) -> SchemaCompiler:
    return SchemaCompiler(cache, cache.fetcher)


class SchemaCache:
    """Thread-safe registry of compiled schemas keyed by normalized location.

    Attributes:
        fetcher: Retrieves raw schema documents for compilers created by this cache.
    """

    def __init__(
        self,
        fetcher: SchemaFetcher | None = None,
        *,
        compiler_factory: CompilerFactory | None = None,
    ) -> None:
        self.fetcher = fetcher or SchemaFetcher()
        self._compiler_factory = compiler_factory or _default_compiler_factory
        self._schemas: dict[str, JsonSchema] = {}
        self._lock = threading.Lock()

    def get_schema(self, location: str | Path) -> JsonSchema:
        """Return the compiled schema for location, compiling it if needed.

        Raises:
            SchemaCompileError: If the schema has to be compiled and can't be.
        """
        key = normalize_location(location)
        schema = self._schemas.get(key)
        if schema is not None:
            return schema
        logger.debug(f"Cache miss for {key}, compiling")
        return self._compiler_factory(self).compile(key)

    def has_schema(self, location: str | Path) -> bool:
        return normalize_location(location) in self._schemas

    def register_schema(self, location: str | Path, schema: JsonSchema) -> JsonSchema:
        """Register a compiled schema unless one is already registered.

        Returns:
            The schema now registered for location, which is the earlier
            one if this registration lost.
        """
        key = normalize_location(location)
        with self._lock:
            registered = self._schemas.setdefault(key, schema)
        if registered is not schema:
            logger.debug(f"Schema for {key} already registered, keeping the existing one")
        return registered

    def locations(self) -> list[str]:
        """List every registered location, sorted."""
        with self._lock:
            return sorted(self._schemas)

    def close(self) -> None:
        """Release the fetcher's resources."""
        self.fetcher.close()

    def __contains__(self, location: object) -> bool:
        return isinstance(location, (str, Path)) and self.has_schema(location)

    def __len__(self) -> int:
        return len(self._schemas)
