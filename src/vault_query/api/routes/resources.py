"""Schema resource endpoints.

GET  /v1/resources       — list one resource per registered schema
POST /v1/resources/read  — fetch the schema document behind a resource URI
"""

from __future__ import annotations

from collections.abc import Mapping  # noqa: TCH003 — runtime: Depends()
from typing import Annotated

import orjson
from fastapi import APIRouter, Depends

from vault_query.api.dependencies import get_schema_source, get_schemas, get_settings
from vault_query.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    ListResourcesResponse,
    ReadResourceRequest,
    ReadResourceResponse,
    ResourceContents,
)
from vault_query.domain.resources import list_resources, parse_resource_uri, schema_url
from vault_query.ports.schema_source import SchemaSource  # noqa: TCH001 — runtime: Depends()
from vault_query.settings import Settings  # noqa: TCH001 — runtime: Depends()

router = APIRouter(prefix="/resources", tags=["resources"])

SchemasDep = Annotated[Mapping[str, str], Depends(get_schemas)]
SchemaSourceDep = Annotated[SchemaSource, Depends(get_schema_source)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get("", response_model=ListResourcesResponse)
async def get_resources(
    schemas: SchemasDep,
    settings: SettingsDep,
) -> ListResourcesResponse:
    """List every registered schema as a JSON resource."""
    return ListResourcesResponse(
        resources=list_resources(schemas, settings.resources.base_url),
    )


@router.post("/read", response_model=ReadResourceResponse)
async def read_resource(
    body: ReadResourceRequest,
    schemas: SchemasDep,
    schema_source: SchemaSourceDep,
) -> ReadResourceResponse:
    """Fetch the schema document addressed by a resource URI."""
    schema_name = parse_resource_uri(body.uri)
    document = await schema_source.fetch(schema_url(schema_name, schemas))
    return ReadResourceResponse(
        contents=[
            ResourceContents(uri=body.uri, text=orjson.dumps(document).decode()),
        ],
    )
