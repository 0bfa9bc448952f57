"""Run the bundled Alembic migrations without an ``alembic.ini``."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from venturepay.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
PROJECT_ROOT: Final[Path] = MIGRATIONS_PATH.parents[4]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"

RESERVED_OPTIONS: Final[frozenset[str]] = frozenset({"script_location", "path_separator"})


def _pyproject_options() -> dict[str, str]:
    """``[tool.alembic]`` from a source checkout; empty for an installed wheel."""

    if not PYPROJECT_PATH.is_file():
        return {}
    with PYPROJECT_PATH.open("rb") as handle:
        section = tomllib.load(handle).get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def _script_location(options: dict[str, str]) -> Path:
    configured = options.get("script_location")
    if configured is None:
        return MIGRATIONS_PATH
    candidate = Path(configured)
    if not candidate.is_absolute():
        candidate = PROJECT_ROOT / candidate
    return candidate if candidate.is_dir() else MIGRATIONS_PATH


def build_config() -> Config:
    options = _pyproject_options()
    config = Config()
    config.set_main_option("script_location", str(_script_location(options)))
    config.set_main_option("path_separator", "os")
    for key, value in options.items():
        if key not in RESERVED_OPTIONS:
            config.set_main_option(key, value)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema to the latest revision.

    With ``engine`` the migration runs on one of its connections, which keeps
    in-memory SQLite databases intact; otherwise Alembic connects to the URI.
    """

    config = build_config()
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_uri())
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
