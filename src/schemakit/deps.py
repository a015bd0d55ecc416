"""Wiring of the HTTP client, fetcher and cache."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from schemakit.cache import SchemaCache
from schemakit.config import SchemakitSettings
from schemakit.fetch import SchemaFetcher

logger = logging.getLogger(__name__)

_default_cache: SchemaCache | None = None
_default_cache_lock = threading.Lock()


@contextmanager
def build_cache(settings: SchemakitSettings | None = None) -> Iterator[SchemaCache]:
    """Build a schema cache backed by a scoped HTTP client.

    This is a context manager that properly cleans up resources.

    Args:
        settings: Runtime settings (defaults to SchemakitSettings.from_env()).

    Yields:
        A SchemaCache whose compilers fetch through the scoped client.

    Example:
        with build_cache() as cache:
            schema = cache.get_schema("schemas/order.json")
            errors = schema.validate(document)
    """
    settings = settings or SchemakitSettings.from_env()

    http_client = httpx.Client(
        timeout=settings.http_timeout,
        follow_redirects=settings.follow_redirects,
    )

    try:
        yield SchemaCache(SchemaFetcher(http_client))
    finally:
        http_client.close()


def get_default_cache() -> SchemaCache:
    """Return the process-wide cache, creating it on first use."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            settings = SchemakitSettings.from_env()
            logger.debug("Creating process-wide schema cache")
            _default_cache = SchemaCache(
                SchemaFetcher(
                    timeout=settings.http_timeout,
                    follow_redirects=settings.follow_redirects,
                )
            )
        return _default_cache
