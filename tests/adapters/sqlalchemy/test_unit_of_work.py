from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from venturepay.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyShopUnitOfWork,
    SqlAlchemyVerificationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from venturepay.domain.errors import DuplicateGrantError, StoreUnavailableError
from tests.helpers.catalog import make_transaction

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyShopUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_repositories_are_unavailable_outside_the_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyVerificationUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_and_exit_without_commit_discards(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    kept = make_transaction("cs_kept")
    dropped = make_transaction("cs_dropped")

    with SqlAlchemyShopUnitOfWork() as uow:
        uow.repositories.transactions.add(kept)
        uow.commit()

    with SqlAlchemyShopUnitOfWork() as uow:
        uow.repositories.transactions.add(dropped)

    with SqlAlchemyShopUnitOfWork() as uow:
        assert len(uow.repositories.transactions.find_by_reference("cs_kept")) == 1
        assert uow.repositories.transactions.find_by_reference("cs_dropped") == []


def test_database_errors_surface_as_store_unavailable(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StoreUnavailableError) as exc_info, SqlAlchemyShopUnitOfWork() as uow:
        uow.session.execute(text("SELECT * FROM no_such_table"))

    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_domain_errors_pass_through_and_roll_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(DuplicateGrantError), SqlAlchemyShopUnitOfWork() as uow:
        uow.repositories.transactions.add(make_transaction("cs_rolled_back"))
        uow.session.flush()
        raise DuplicateGrantError("simulated")

    with SqlAlchemyShopUnitOfWork() as uow:
        assert uow.repositories.transactions.find_by_reference("cs_rolled_back") == []
