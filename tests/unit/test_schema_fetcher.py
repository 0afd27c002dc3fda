"""Unit tests for the HTTP schema fetcher, using httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from vault_query.adapters.http.schema_fetcher import HttpSchemaFetcher
from vault_query.settings import ResourceSettings

SCHEMA_URL = "https://common.schemas.verida.io/social/email/v0.1.0/schema.json"
SCHEMA_DOC = {"title": "Email", "properties": {"subject": {"type": "string"}}}


def _handler(request: httpx.Request) -> httpx.Response:
    if str(request.url) == SCHEMA_URL:
        return httpx.Response(200, json=SCHEMA_DOC)
    return httpx.Response(404, json={"error": "not found"})


class TestHttpSchemaFetcher:
    async def test_fetch_decodes_json(self) -> None:
        fetcher = HttpSchemaFetcher.create(ResourceSettings(), transport=httpx.MockTransport(_handler))

        try:
            assert await fetcher.fetch(SCHEMA_URL) == SCHEMA_DOC
        finally:
            await fetcher.close()

    async def test_fetch_raises_on_http_error(self) -> None:
        fetcher = HttpSchemaFetcher.create(ResourceSettings(), transport=httpx.MockTransport(_handler))

        try:
            with pytest.raises(httpx.HTTPStatusError):
                await fetcher.fetch("https://common.schemas.verida.io/missing.json")
        finally:
            await fetcher.close()

    async def test_fetch_raises_upstream_error_on_non_json_body(self) -> None:
        transport = httpx.MockTransport(lambda _request: httpx.Response(200, text="<html>"))
        fetcher = HttpSchemaFetcher.create(ResourceSettings(), transport=transport)

        try:
            with pytest.raises(httpx.DecodingError, match="not valid JSON"):
                await fetcher.fetch(SCHEMA_URL)
        finally:
            await fetcher.close()
