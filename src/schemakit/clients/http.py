"""Thin httpx wrapper used to retrieve remote schema documents.

Every request is logged once on the way out and once on the way back,
with passwords and token-like query values masked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from schemakit.errors import HTTPError, TimeoutError

logger = logging.getLogger(__name__)

_SECRET_QUERY_KEYS = frozenset({"token", "access_token", "api_key", "apikey", "key", "sig"})


@dataclass(frozen=True)
class HTTPResponse:
    """What came back from a schema server.

    Attributes:
        status_code: Numeric status of the reply
        body: Decoded text of the reply
        headers: Reply headers
        elapsed_ms: Round trip time in milliseconds
    """

    status_code: int
    body: str
    headers: dict[str, str]
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status_code // 100 == 2


def request(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
) -> HTTPResponse:
    """Send one request through ``client`` and wrap the reply.

    Transport failures are translated into schemakit errors; HTTP status
    codes are returned as-is so callers decide what counts as failure.

    Raises:
        TimeoutError: No reply arrived within the timeout
        HTTPError: The request could not be sent at all
    """
    masked = _redact_url(url)
    verb = method.upper()
    logger.debug(f"Fetching {verb} {masked}")

    try:
        response = client.request(method=verb, url=url, headers=headers, timeout=timeout)
    except httpx.TimeoutException as e:
        raise TimeoutError(
            f"Timed out waiting for {verb} {masked}",
            url=masked,
            timeout_seconds=timeout or client.timeout.connect,
        ) from e
    except httpx.RequestError as e:
        raise HTTPError(f"Could not reach {masked}: {e}", url=masked, method=verb) from e

    elapsed_ms = round(response.elapsed.total_seconds() * 1000, 2)
    logger.debug(f"Fetched {verb} {masked}: status {response.status_code} after {elapsed_ms}ms")

    return HTTPResponse(
        status_code=response.status_code,
        body=response.text,
        headers=dict(response.headers),
        elapsed_ms=elapsed_ms,
    )


def get_text(client: httpx.Client, url: str, *, timeout: float | None = None) -> str:
    """GET a URL and return its body, treating any non-2xx status as an error."""
    response = request(client, "GET", url, timeout=timeout)
    if not response.ok:
        masked = _redact_url(url)
        raise HTTPError(
            f"Unexpected status {response.status_code} for GET {masked}",
            status_code=response.status_code,
            url=masked,
        )
    return response.body


def _redact_url(url: str) -> str:
    """Mask the password in userinfo and any secret-looking query values."""
    parts = urlsplit(url)
    netloc = parts.netloc
    if "@" in netloc:
        userinfo, host = netloc.rsplit("@", 1)
        if ":" in userinfo:
            netloc = f"{userinfo.split(':', 1)[0]}:***@{host}"
    query = parts.query
    if query:
        pairs = [
            (key, "***" if key.lower() in _SECRET_QUERY_KEYS else value)
            for key, value in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs, safe="*")
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))
