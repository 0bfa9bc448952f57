"""Root logger setup shared by the server and the CLI."""

from __future__ import annotations

import logging

# Per-request INFO lines from these would drown the webhook log.
CHATTY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Install a single stream handler on the root logger.

    ``force=True`` replaces handlers that are already present.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    if level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
