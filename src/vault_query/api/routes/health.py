"""Health check endpoint.

GET /v1/health — reports service status and session cache occupancy.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Service health check.

    Returns "healthy" with cache statistics when the session cache is
    running, and "unhealthy" when it is missing or shut down.
    """
    cache = getattr(request.app.state, "session_cache", None)
    if cache is None or cache.closed:
        logger.warning("health_check_cache_unavailable")
        return {"status": "unhealthy", "cache": None, "version": "0.1.0"}

    return {
        "status": "healthy",
        "cache": cache.stats(),
        "version": "0.1.0",
    }
