"""Command-line entry point: ``python -m vault_query [PRIVATE_KEY]``."""

from __future__ import annotations

import argparse

import uvicorn

from vault_query.api.app import create_app
from vault_query.logs import configure_logging
from vault_query.settings import Settings


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-query",
        description="Serve read-only vault queries over HTTP.",
    )
    parser.add_argument(
        "private_key",
        nargs="?",
        default=None,
        help="Default credential for requests without X-Private-Key (else VQ_PRIVATE_KEY)",
    )
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--json-logs", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    settings = Settings()
    args = build_parser(settings).parse_args(argv)

    updates = {"host": args.host, "port": args.port, "log_level": args.log_level}
    if args.private_key:
        updates["private_key"] = args.private_key
    settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level, json=args.json_logs)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
