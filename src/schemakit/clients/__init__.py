"""Transport clients used to retrieve schema documents."""

from schemakit.clients.http import HTTPResponse, request

__all__ = ["request", "HTTPResponse"]
