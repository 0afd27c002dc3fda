"""Tool endpoints.

GET  /v1/tools       — list the available tools and their input schemas
POST /v1/tools/call  — invoke a tool with the caller's credential
"""

from __future__ import annotations

from collections.abc import Mapping  # noqa: TCH003 — runtime: Depends()
from typing import Annotated

from fastapi import APIRouter, Depends

from vault_query.api.dependencies import (
    get_credential,
    get_request_id,
    get_schemas,
    get_session_cache,
)
from vault_query.cache.session_cache import SessionCache  # noqa: TCH001 — runtime: Depends()
from vault_query.domain.models import (  # noqa: TCH001 — runtime: type annotation + response_model
    ListToolsResponse,
    ToolCallRequest,
    ToolCallResponse,
)
from vault_query.tools.query import TOOLS, call_tool

router = APIRouter(prefix="/tools", tags=["tools"])

SessionCacheDep = Annotated[SessionCache, Depends(get_session_cache)]
SchemasDep = Annotated[Mapping[str, str], Depends(get_schemas)]
CredentialDep = Annotated[str, Depends(get_credential)]
RequestIdDep = Annotated[str, Depends(get_request_id)]


@router.get("", response_model=ListToolsResponse)
async def get_tools() -> ListToolsResponse:
    """List the registered tools."""
    return ListToolsResponse(tools=TOOLS)


@router.post("/call", response_model=ToolCallResponse)
async def post_tool_call(
    body: ToolCallRequest,
    session_cache: SessionCacheDep,
    schemas: SchemasDep,
    credential: CredentialDep,
    request_id: RequestIdDep,
) -> ToolCallResponse:
    """Invoke a tool on behalf of the request credential."""
    return await call_tool(
        body,
        cache=session_cache,
        credential=credential,
        caller_token=request_id,
        schemas=schemas,
    )
