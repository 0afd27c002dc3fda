"""API middleware: error handling and request timing.

Registers exception handlers and a request timing middleware
on the FastAPI app.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from vault_query.domain.errors import (
    AuthInvalid,
    ConnectionFailed,
    DerivationFailed,
    MissingCredential,
    NotFoundError,
    ToolError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

# Domain error -> (status code, error code)
_ERROR_STATUS: dict[type[Exception], tuple[int, str]] = {
    MissingCredential: (401, "missing_credential"),
    AuthInvalid: (401, "auth_invalid"),
    DerivationFailed: (400, "derivation_failed"),
    ConnectionFailed: (503, "connection_failed"),
    NotFoundError: (404, "not_found"),
    ToolError: (400, "tool_error"),
}


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _domain_error_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Convert a domain error to its mapped status code."""
    status_code, code = next(
        (mapped for exc_type, mapped in _ERROR_STATUS.items() if isinstance(exc, exc_type)),
        (500, "internal_error"),
    )
    logger.info(
        "request_failed",
        path=request.url.path,
        status_code=status_code,
        error=code,
    )
    return ORJSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": code},
    )


async def _upstream_error_handler(
    _request: Request,
    exc: httpx.HTTPError,
) -> ORJSONResponse:
    """Convert schema fetch failures to a 502 response."""
    logger.warning("upstream_request_failed", error=str(exc))
    return ORJSONResponse(
        status_code=502,
        content={"detail": str(exc), "error": "upstream_error"},
    )


async def _generic_error_handler(
    _request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Convert unhandled exceptions to a structured 500 response."""
    logger.error("unhandled_exception", exc_info=exc)
    return ORJSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__,
        },
    )


# ---------------------------------------------------------------------------
# Request timing middleware
# ---------------------------------------------------------------------------


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Adds an X-Request-Time-Ms header to every response."""

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        start_time = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        response.headers["X-Request-Time-Ms"] = f"{elapsed_ms:.1f}"
        return response


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_middleware(app: FastAPI) -> None:
    """Attach all middleware and exception handlers to the app."""
    for exc_type in _ERROR_STATUS:
        app.add_exception_handler(exc_type, _domain_error_handler)
    app.add_exception_handler(httpx.HTTPError, _upstream_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_error_handler)
    app.add_middleware(RequestTimingMiddleware)
