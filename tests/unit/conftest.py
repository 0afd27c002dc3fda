"""Unit test conftest with a fully wired app for API testing.

The app runs its real lifespan; the session factory is loaded from
``tests.fixtures.sessions:build_factory`` and the schema fetcher is
swapped for an in-memory stub after startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from vault_query.settings import SCHEMAS, CacheSettings, NetworkSettings, Settings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi.testclient import TestClient


class StubSchemaSource:
    """SchemaSource returning a canned document per registered URL."""

    def __init__(self) -> None:
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> Any:
        self.fetched.append(url)
        name = next(name for name, schema in SCHEMAS.items() if schema == url)
        return {"$id": url, "title": name.title(), "type": "object"}

    async def close(self) -> None:
        pass


@pytest.fixture()
def app_settings() -> Settings:
    """Settings pointing at the fake factory, with a default credential."""
    return Settings(
        private_key="cred-default",
        cache=CacheSettings(sweep_interval_seconds=0),
        network=NetworkSettings(
            name="testnet",
            session_factory="tests.fixtures.sessions:build_factory",
        ),
    )


@pytest.fixture()
def stub_schema_source() -> StubSchemaSource:
    return StubSchemaSource()


@pytest.fixture()
def test_client(
    app_settings: Settings,
    stub_schema_source: StubSchemaSource,
) -> Iterator[TestClient]:
    """TestClient over the real app factory (no network needed)."""
    from fastapi.testclient import TestClient as _TestClient

    from vault_query.api.app import create_app

    app = create_app(app_settings)
    with _TestClient(app) as client:
        app.state.schema_source = stub_schema_source
        yield client
