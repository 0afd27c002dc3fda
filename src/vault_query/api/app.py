"""FastAPI application factory.

Creates and configures the Vault Query API with lifespan management
for the session cache and the schema fetcher.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from vault_query.adapters.factory_loader import load_session_factory
from vault_query.adapters.http.schema_fetcher import HttpSchemaFetcher
from vault_query.api.middleware import register_middleware
from vault_query.api.routes.health import router as health_router
from vault_query.api.routes.identity import router as identity_router
from vault_query.api.routes.resources import router as resources_router
from vault_query.api.routes.tools import router as tools_router
from vault_query.cache.session_cache import SessionCache
from vault_query.settings import SCHEMAS, Settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the session cache and schema fetcher across the app lifecycle."""
    settings: Settings = app.state.settings

    # -- Startup: create components and attach to app state ----------------
    factory = load_session_factory(settings.network.session_factory, settings.network)
    session_cache = SessionCache.from_settings(factory, settings)
    await session_cache.start()

    schema_source = HttpSchemaFetcher.create(settings.resources)

    app.state.session_cache = session_cache
    app.state.schema_source = schema_source
    app.state.schemas = SCHEMAS

    logger.info(
        "app_started",
        network=settings.network.name,
        cache_expiry_seconds=settings.cache.expiry_seconds,
        default_credential=settings.private_key is not None,
    )

    yield

    # -- Shutdown: release sessions and connections ------------------------
    await session_cache.close()
    await schema_source.close()
    logger.info("app_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    app = FastAPI(
        title="Vault Query API",
        description="Read-only queries over per-identity vault datastores",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()

    register_middleware(app)

    app.include_router(health_router, prefix="/v1")
    app.include_router(identity_router, prefix="/v1")
    app.include_router(resources_router, prefix="/v1")
    app.include_router(tools_router, prefix="/v1")

    return app
