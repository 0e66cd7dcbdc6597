"""Entrypoint for the pal-occupy bot and its administration commands."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from pal_occupy.config import get_settings
from pal_occupy.database import get_session_factory, run_migrations
from pal_occupy.models import import_catalog, seed_point_types

logger = logging.getLogger("pal_occupy")


def _serve(args: argparse.Namespace) -> None:
    settings = get_settings()
    host = args.host or settings.http_host
    port = args.port or settings.http_port
    uvicorn.run(
        "pal_occupy.api.app:app",
        host=host,
        port=port,
        reload=args.reload,
        factory=False,
        log_level=settings.log_level.lower(),
    )


def _init_db(args: argparse.Namespace) -> None:  # noqa: ARG001
    run_migrations(Path(__file__).parent)
    logger.info("database migrated to head")


def _import_catalog(args: argparse.Namespace) -> None:
    payload = json.loads(Path(args.file).read_text(encoding="utf-8"))
    with get_session_factory()() as session:
        types, points = import_catalog(session, payload)
    logger.info(
        "imported %d point types and %d points; restart the bot to load them", types, points
    )


def _seed_defaults(args: argparse.Namespace) -> None:  # noqa: ARG001
    with get_session_factory()() as session:
        seed_point_types(session)
    logger.info("default point types present")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ore point occupation bot for Discord")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the Discord client and the HTTP API")
    serve.add_argument("--host", default=None, help="Host interface to bind")
    serve.add_argument("--port", type=int, default=None, help="TCP port to listen on")
    serve.add_argument("--reload", action="store_true", help="Enable autoreload (dev mode)")
    serve.set_defaults(handler=_serve)

    init_db = subparsers.add_parser("init-db", help="Apply database migrations")
    init_db.set_defaults(handler=_init_db)

    import_cmd = subparsers.add_parser(
        "import-catalog", help="Insert or update point types and points from a JSON file"
    )
    import_cmd.add_argument("file", help="JSON document with 'point_types' and 'points'")
    import_cmd.set_defaults(handler=_import_catalog)

    seed = subparsers.add_parser("seed-defaults", help="Insert the default ore point types")
    seed.set_defaults(handler=_seed_defaults)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args.handler(args)


if __name__ == "__main__":
    main()
