"""Unit tests for schema resource naming and URI parsing."""

from __future__ import annotations

import pytest

from vault_query.domain.errors import InvalidResourceUri, UnknownSchema
from vault_query.domain.resources import (
    list_resources,
    parse_resource_uri,
    resource_uri,
    schema_url,
)
from vault_query.settings import SCHEMAS

BASE_URL = "verida://datastore/"


class TestResourceUri:
    def test_builds_uri_under_base(self) -> None:
        assert resource_uri("EMAIL", BASE_URL) == "verida://datastore/EMAIL/schema"

    def test_adds_missing_trailing_slash(self) -> None:
        assert resource_uri("EMAIL", "verida://datastore") == "verida://datastore/EMAIL/schema"


class TestListResources:
    def test_one_resource_per_schema_in_order(self) -> None:
        resources = list_resources(SCHEMAS, BASE_URL)

        assert [r.uri for r in resources] == [
            f"verida://datastore/{name}/schema" for name in SCHEMAS
        ]

    def test_resource_fields(self) -> None:
        resource = list_resources({"POST": "https://example.test/post.json"}, BASE_URL)[0]

        assert resource.name == '"POST" database schema'
        assert resource.mime_type == "application/json"
        assert resource.model_dump(by_alias=True)["mimeType"] == "application/json"


class TestParseResourceUri:
    def test_round_trips_built_uri(self) -> None:
        assert parse_resource_uri(resource_uri("CHAT_MESSAGE", BASE_URL)) == "CHAT_MESSAGE"

    def test_rejects_wrong_resource_type(self) -> None:
        with pytest.raises(InvalidResourceUri, match="Invalid resource URI: EMAIL data"):
            parse_resource_uri("verida://datastore/EMAIL/data")

    def test_rejects_missing_schema_name(self) -> None:
        with pytest.raises(InvalidResourceUri):
            parse_resource_uri("verida://datastore/schema")


class TestSchemaUrl:
    def test_known_schema(self) -> None:
        assert schema_url("EMAIL", SCHEMAS) == SCHEMAS["EMAIL"]

    def test_unknown_schema(self) -> None:
        with pytest.raises(UnknownSchema, match="NOPE"):
            schema_url("NOPE", SCHEMAS)
