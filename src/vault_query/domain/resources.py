"""Schema resource naming and URI parsing.

Every registered schema is exposed as ``<base>/<NAME>/schema``.
Pure Python — zero framework imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from vault_query.domain.errors import InvalidResourceUri, UnknownSchema
from vault_query.domain.models import ResourceDescriptor

if TYPE_CHECKING:
    from collections.abc import Mapping

SCHEMA_PATH = "schema"


def resource_uri(schema_name: str, base_url: str) -> str:
    """Build the resource URI for a schema name."""
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}{schema_name}/{SCHEMA_PATH}"


def list_resources(schemas: Mapping[str, str], base_url: str) -> list[ResourceDescriptor]:
    """Describe one resource per registered schema, in registry order."""
    return [
        ResourceDescriptor(
            uri=resource_uri(name, base_url),
            name=f'"{name}" database schema',
        )
        for name in schemas
    ]


def parse_resource_uri(uri: str) -> str:
    """Return the schema name addressed by a resource URI.

    The last path segment must be ``schema``; the one before it names the
    schema. Raises ``InvalidResourceUri`` otherwise.
    """
    components = urlsplit(uri).path.split("/")
    resource_type = components.pop() if components else ""
    schema_name = components.pop() if components else ""
    if resource_type != SCHEMA_PATH or not schema_name:
        raise InvalidResourceUri(schema_name, resource_type)
    return schema_name


def schema_url(schema_name: str, schemas: Mapping[str, str]) -> str:
    """Look up the schema document URL, raising ``UnknownSchema`` if unregistered."""
    try:
        return schemas[schema_name]
    except KeyError:
        raise UnknownSchema(schema_name) from None
