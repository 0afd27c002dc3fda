"""Request and response models for the resource and tool surface.

All models are pure Python + Pydantic v2. Zero framework imports.
Wire names follow the camelCase used by tool clients (``mimeType``,
``schemaName``, ``isError``); Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

JSON_MIME_TYPE = "application/json"


class _WireModel(BaseModel):
    """Base model that accepts both field names and camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class ResourceDescriptor(_WireModel):
    """A schema document advertised as a readable resource."""

    uri: str
    mime_type: str = Field(default=JSON_MIME_TYPE, alias="mimeType")
    name: str


class ListResourcesResponse(_WireModel):
    resources: list[ResourceDescriptor] = Field(default_factory=list)


class ReadResourceRequest(_WireModel):
    uri: str = Field(min_length=1)


class ResourceContents(_WireModel):
    uri: str
    mime_type: str = Field(default=JSON_MIME_TYPE, alias="mimeType")
    text: str


class ReadResourceResponse(_WireModel):
    contents: list[ResourceContents] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class ToolDescriptor(_WireModel):
    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class ListToolsResponse(_WireModel):
    tools: list[ToolDescriptor] = Field(default_factory=list)


class ToolCallRequest(_WireModel):
    name: str = Field(min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


class TextContent(_WireModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResponse(_WireModel):
    content: list[TextContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")


class QueryArguments(_WireModel):
    """Arguments accepted by the ``query`` tool."""

    schema_name: str = Field(alias="schemaName", min_length=1)
    filter: dict[str, Any] = Field(default_factory=dict)
    limit: int | None = Field(default=None, ge=0)
    skip: int | None = Field(default=None, ge=0)


class QueryResult(_WireModel):
    """Rows returned by the ``query`` tool plus the datastore row count."""

    items: list[dict[str, Any]] = Field(default_factory=list)
    limit: int | None = None
    skip: int | None = None
    db_rows: int = Field(alias="dbRows")


# ---------------------------------------------------------------------------
# Identity / health
# ---------------------------------------------------------------------------


class IdentityResponse(BaseModel):
    identity: str
    network: str
    timestamp: str
