# ruff: noqa: T201

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from venturepay.adapters.catalog_file import read_catalog
from venturepay.api import create_app
from venturepay.app import ensure_started, handle_payment_webhook, load_catalog
from venturepay.config import configure_logging
from venturepay.domain.model import WebhookOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 5000


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="PayMongo checkout and reward fulfillment")
    parser.add_argument(
        "--database-uri",
        type=str,
        default=None,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data directory)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", type=str, default=DEFAULT_HOST, help="Bind address")
    serve.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Listen port (default: %(default)s)",
    )

    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    replay = subparsers.add_parser("replay", help="Process a stored webhook payload")
    replay.add_argument("payload", type=Path, help="JSON file holding the webhook body")

    catalog = subparsers.add_parser("load-catalog", help="Upsert items and offers")
    catalog.add_argument("catalog", type=Path, help="JSON file with 'items' and 'offers'")

    return parser.parse_args(list(argv))


def _replay(path: Path) -> int:
    payload = json.loads(path.read_text(encoding="utf-8"))
    result = handle_payment_webhook(payload)
    print(json.dumps(dataclasses.asdict(result), indent=2, default=str))
    return 0 if result.outcome is WebhookOutcome.PROCESSED else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    exit_code = 0
    try:
        ensure_started(database_uri=parsed_args.database_uri)
        if parsed_args.command == "serve":
            uvicorn.run(create_app(), host=parsed_args.host, port=parsed_args.port)
        elif parsed_args.command == "init-db":
            log.info("Database schema is up to date")
        elif parsed_args.command == "replay":
            exit_code = _replay(parsed_args.payload)
        elif parsed_args.command == "load-catalog":
            items, offers = read_catalog(parsed_args.catalog)
            load_catalog(items, offers)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
