"""HTTP SchemaSource adapter.

Implements the ``SchemaSource`` protocol with a shared
``httpx.AsyncClient``. Documents are decoded with orjson.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import orjson
import structlog

if TYPE_CHECKING:
    from vault_query.settings import ResourceSettings

log = structlog.get_logger(__name__)


class HttpSchemaFetcher:
    """SchemaSource implementation over HTTP(S).

    Satisfies the ``vault_query.ports.schema_source.SchemaSource`` protocol.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def create(
        cls,
        settings: ResourceSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpSchemaFetcher:
        """Factory: build a fetcher with its own client from settings."""
        client = httpx.AsyncClient(
            timeout=settings.fetch_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )
        return cls(client)

    async def fetch(self, url: str) -> Any:
        response = await self._client.get(url)
        response.raise_for_status()
        log.debug("schema_fetched", url=url, status=response.status_code)
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            msg = f"Schema document at {url} is not valid JSON: {exc}"
            raise httpx.DecodingError(msg, request=response.request) from exc

    async def close(self) -> None:
        await self._client.aclose()
