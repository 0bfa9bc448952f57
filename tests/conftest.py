from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from venturepay.adapters.sqlalchemy import start_mappers
from venturepay.adapters.sqlalchemy.migrations import upgrade_head
from venturepay.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyShopUnitOfWork,
    SqlAlchemyVerificationUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.clock import FIXED_NOW

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from datetime import datetime


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # One shared connection so TestClient worker threads see the same in-memory database.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def started_store(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()


@pytest.fixture
def shop_uow(started_store: Engine) -> Callable[[], SqlAlchemyShopUnitOfWork]:
    _ = started_store
    return SqlAlchemyShopUnitOfWork


@pytest.fixture
def verification_uow(
    started_store: Engine,
) -> Callable[[], SqlAlchemyVerificationUnitOfWork]:
    _ = started_store
    return SqlAlchemyVerificationUnitOfWork
