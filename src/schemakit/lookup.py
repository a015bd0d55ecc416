"""Schema lookups - map application-level schema names to locations.

A lookup runs before compilation: callers resolve a name such as
"orders/create.json" to an absolute URL and hand that to the cache.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Protocol

from schemakit.errors import SchemaNotFoundError


class SchemaLookup(Protocol):
    """Resolves a schema name to an absolute location URL."""

    def get_schema_url(self, name: str) -> str: ...


def _relative_name(name: str | None) -> str:
    if not name:
        raise ValueError("schema name cannot be empty")
    return name.lstrip("/")


class DirectorySchemaLookup:
    """Finds schemas under a directory on the filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def get_schema_url(self, name: str) -> str:
        """Resolve name relative to the root directory.

        Raises:
            ValueError: If name is empty.
            SchemaNotFoundError: If no such file exists.
        """
        path = self.root / _relative_name(name)
        if not path.is_file():
            raise SchemaNotFoundError(name, searched=str(self.root))
        return path.resolve().as_uri()


class PackageSchemaLookup:
    """Finds schemas shipped as data files inside an installed package.

    Example:
        lookup = PackageSchemaLookup("myservice.schemas")
        cache.get_schema(lookup.get_schema_url("order.json"))
    """

    def __init__(self, package: str) -> None:
        self.package = package

    def get_schema_url(self, name: str) -> str:
        """Resolve name inside the package.

        Raises:
            ValueError: If name is empty.
            SchemaNotFoundError: If the package or resource doesn't exist.
        """
        relative = _relative_name(name)
        try:
            resource = resources.files(self.package).joinpath(relative)
        except ModuleNotFoundError as e:
            raise SchemaNotFoundError(name, searched=self.package) from e
        if not resource.is_file():
            raise SchemaNotFoundError(name, searched=self.package)
        # Regular (non-zipped) packages expose real filesystem paths
        return Path(str(resource)).resolve().as_uri()
