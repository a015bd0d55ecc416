"""Retrieval of raw schema documents by location.

Locations are absolute URLs. file:// URLs are read from disk and
http(s):// URLs through an httpx client; the text is parsed as JSON with
non-integral numbers kept as Decimal so configured bounds stay exact.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from schemakit.clients.http import get_text
from schemakit.errors import FetchError

SUPPORTED_SCHEMES = frozenset({"file", "http", "https"})

logger = logging.getLogger(__name__)


def parse_json(text: str) -> Any:
    """Parse JSON text, keeping non-integral numbers as Decimal.

    NaN and Infinity are rejected since they are not JSON.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON.
    """

    def reject_constant(name: str) -> Any:
        raise json.JSONDecodeError(f"Invalid JSON constant {name}", text, max(text.find(name), 0))

    return json.loads(text, parse_float=Decimal, parse_constant=reject_constant)


class SchemaFetcher:
    """Reads and parses schema documents from file:// and http(s):// locations.

    The HTTP client may be injected (and is then owned by the caller) or is
    created on first use and released by close().
    """

    def __init__(
        self,
        http: httpx.Client | None = None,
        *,
        timeout: float = 30.0,
        follow_redirects: bool = True,
    ) -> None:
        self._http = http
        self._owns_http = http is None
        self._timeout = timeout
        self._follow_redirects = follow_redirects

    def fetch(self, location: str) -> Any:
        """Retrieve and parse the document at location.

        Args:
            location: Absolute file:// or http(s):// URL.

        Returns:
            The parsed JSON document.

        Raises:
            FetchError: If the document can't be read.
            json.JSONDecodeError: If the document isn't valid JSON.
        """
        return parse_json(self.read_text(location))

    def read_text(self, location: str) -> str:
        scheme = urlsplit(location).scheme.lower()
        if scheme == "file":
            return self._read_file(location)
        if scheme in ("http", "https"):
            return get_text(self._client(), location)
        raise FetchError(f"Unsupported schema location scheme '{scheme}'", url=location)

    def close(self) -> None:
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def _client(self) -> httpx.Client:
        if self._http is None:
            logger.debug("Creating HTTP client for schema retrieval")
            self._http = httpx.Client(
                timeout=self._timeout,
                follow_redirects=self._follow_redirects,
            )
        return self._http

    def _read_file(self, location: str) -> str:
        path = Path(url2pathname(urlsplit(location).path))
        logger.debug(f"Reading schema file {path}")
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise FetchError(f"Could not read {path}: {e.strerror or e}", url=location) from e
        except UnicodeDecodeError as e:
            raise FetchError(
                f"Could not read {path}: not valid UTF-8 ({e.reason})", url=location
            ) from e
