"""FastAPI dependency injection helpers.

Extracts shared resources from ``app.state`` so route handlers can
declare them via ``Depends()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated
from uuid import uuid4

from fastapi import Header, Request  # noqa: TCH002 — runtime: FastAPI dependency injection

from vault_query.domain.errors import MissingCredential

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vault_query.cache.session_cache import SessionCache
    from vault_query.ports.schema_source import SchemaSource
    from vault_query.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the application settings from app state."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_session_cache(request: Request) -> SessionCache:
    """Return the session cache from app state."""
    return request.app.state.session_cache  # type: ignore[no-any-return]


def get_schema_source(request: Request) -> SchemaSource:
    """Return the schema document fetcher from app state."""
    return request.app.state.schema_source  # type: ignore[no-any-return]


def get_schemas(request: Request) -> Mapping[str, str]:
    """Return the schema name -> URL registry from app state."""
    return request.app.state.schemas  # type: ignore[no-any-return]


def get_credential(
    request: Request,
    x_private_key: Annotated[str | None, Header()] = None,
) -> str:
    """Return the request credential, falling back to the configured default."""
    credential = x_private_key or request.app.state.settings.private_key
    if not credential:
        msg = "No credential supplied (X-Private-Key header) and no default configured"
        raise MissingCredential(msg)
    return credential


def get_request_id(
    x_request_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the caller's request id, or mint one."""
    return x_request_id or f"req-{uuid4().hex}"
