"""The ``query`` tool: read-only datastore queries against a known schema.

Leases the caller's session from the cache, opens the datastore for the
requested schema and returns the matching documents with a row count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson
import pydantic
import structlog

from vault_query.domain.errors import SessionError, ToolError, UnknownTool
from vault_query.domain.models import (
    QueryArguments,
    QueryResult,
    TextContent,
    ToolCallResponse,
    ToolDescriptor,
)
from vault_query.domain.resources import schema_url

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vault_query.cache.session_cache import SessionCache
    from vault_query.domain.models import ToolCallRequest
    from vault_query.ports.session_factory import Session

log = structlog.get_logger(__name__)

QUERY_TOOL = ToolDescriptor(
    name="query",
    description="Run a read-only CouchDB query using a known schema",
    input_schema={
        "type": "object",
        "properties": {
            "schemaName": {"type": "string"},
            "filter": {"type": "object"},
            "limit": {"type": "number"},
            "skip": {"type": "number"},
        },
    },
)

TOOLS: list[ToolDescriptor] = [QUERY_TOOL]


def count_rows(info: dict[str, Any], indexes: dict[str, Any]) -> int:
    """Document count excluding design/index rows.

    ``total_rows`` counts the built-in ``_id`` index, which is not a stored
    document, hence the ``+ 1``.
    """
    return int(info.get("doc_count", 0)) - int(indexes.get("total_rows", 0)) + 1


def query_options(args: QueryArguments) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if args.limit is not None:
        options["limit"] = args.limit
    if args.skip is not None:
        options["skip"] = args.skip
    return options


def describe_error(exc: Exception) -> str:
    message = str(exc)
    if "invalid encoding" in message:
        return "Invalid encoding (check permissions header)"
    return message


async def run_query(session: Session, url: str, args: QueryArguments) -> QueryResult:
    """Execute a selector query in the session's context."""
    datastore = await session.context.open_datastore(url, {})
    items = await datastore.get_many(args.filter, query_options(args))
    info = await datastore.info()
    indexes = await datastore.get_indexes()
    return QueryResult(
        items=items,
        limit=args.limit,
        skip=args.skip,
        db_rows=count_rows(info, indexes),
    )


def render_result(result: QueryResult) -> ToolCallResponse:
    text = orjson.dumps(result.model_dump(by_alias=True), option=orjson.OPT_INDENT_2).decode()
    return ToolCallResponse(content=[TextContent(text=text)], is_error=False)


async def call_tool(
    request: ToolCallRequest,
    *,
    cache: SessionCache,
    credential: str,
    caller_token: str,
    schemas: Mapping[str, str],
) -> ToolCallResponse:
    """Dispatch a tool call. Only ``query`` is registered."""
    if request.name != QUERY_TOOL.name:
        raise UnknownTool(request.name)

    try:
        args = QueryArguments.model_validate(request.arguments)
    except pydantic.ValidationError as exc:
        raise ToolError(
            request.name,
            f"invalid arguments ({exc.error_count()} errors)",
            request.arguments.get("schemaName"),
        ) from exc

    url = schema_url(args.schema_name, schemas)

    async with cache.lease(credential, caller_token) as session:
        try:
            result = await run_query(session, url, args)
        except SessionError:
            raise
        except Exception as exc:
            log.warning(
                "query_failed",
                identity=session.identity,
                schema=args.schema_name,
                error=str(exc),
            )
            raise ToolError(request.name, describe_error(exc), args.schema_name) from exc

    log.info(
        "query_completed",
        identity=session.identity,
        schema=args.schema_name,
        items=len(result.items),
        caller=caller_token,
    )
    return render_result(result)
