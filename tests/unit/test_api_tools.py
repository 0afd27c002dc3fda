"""Unit tests for the tool endpoints.

Queries run against the fake session factory loaded by the app lifespan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from vault_query.cache.session_cache import SessionCache


def _cache(client: TestClient) -> SessionCache:
    return client.app.state.session_cache  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# GET /v1/tools
# ---------------------------------------------------------------------------


class TestListTools:
    def test_lists_query_tool(self, test_client: TestClient) -> None:
        response = test_client.get("/v1/tools")

        assert response.status_code == 200
        tools = response.json()["tools"]
        assert [tool["name"] for tool in tools] == ["query"]
        assert tools[0]["inputSchema"]["type"] == "object"


# ---------------------------------------------------------------------------
# POST /v1/tools/call
# ---------------------------------------------------------------------------


class TestCallTool:
    def test_query_with_default_credential(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL", "filter": {"folder": "inbox"}}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["isError"] is False
        result = orjson.loads(body["content"][0]["text"])
        assert [item["_id"] for item in result["items"]] == ["e1", "e2"]
        assert result["dbRows"] == 3

    def test_query_with_header_credential(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL"}},
            headers={"X-Private-Key": "cred-other"},
        )

        assert response.status_code == 200
        assert _cache(test_client).get_entry("did:vda:testnet:cred-other") is not None

    def test_repeated_queries_reuse_cached_session(self, test_client: TestClient) -> None:
        for _ in range(3):
            response = test_client.post(
                "/v1/tools/call",
                json={"name": "query", "arguments": {"schemaName": "POST"}},
            )
            assert response.status_code == 200

        cache = _cache(test_client)
        assert cache._factory.establish_calls == ["cred-default"]
        assert cache.get_entry("did:vda:testnet:cred-default").caller_ids == []

    def test_unknown_tool(self, test_client: TestClient) -> None:
        response = test_client.post("/v1/tools/call", json={"name": "drop", "arguments": {}})

        assert response.status_code == 404
        assert response.json()["detail"] == "Unknown tool: drop"

    def test_unknown_schema(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "NOPE"}},
        )

        assert response.status_code == 404

    def test_malformed_credential(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL"}},
            headers={"X-Private-Key": "0xnot-a-key"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "derivation_failed"

    def test_unregistered_identity(self, test_client: TestClient) -> None:
        _cache(test_client)._factory.fail_next(
            "cred-new",
            RuntimeError("Unable to locate DID document"),
        )

        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL"}},
            headers={"X-Private-Key": "cred-new"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == (
            "Invalid credentials or account is not registered to this network: testnet"
        )

    def test_connection_failure(self, test_client: TestClient) -> None:
        _cache(test_client)._factory.fail_next("cred-down", ConnectionRefusedError("refused"))

        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL"}},
            headers={"X-Private-Key": "cred-down"},
        )

        assert response.status_code == 503
        assert response.json()["error"] == "connection_failed"

    def test_missing_credential(self, test_client: TestClient) -> None:
        test_client.app.state.settings = test_client.app.state.settings.model_copy(
            update={"private_key": None},
        )

        response = test_client.post(
            "/v1/tools/call",
            json={"name": "query", "arguments": {"schemaName": "EMAIL"}},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "missing_credential"

    def test_missing_tool_name(self, test_client: TestClient) -> None:
        response = test_client.post("/v1/tools/call", json={"arguments": {}})

        assert response.status_code == 422
