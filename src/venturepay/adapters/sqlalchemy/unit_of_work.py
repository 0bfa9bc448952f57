"""SQLAlchemy-backed units of work for the shop and verification flows."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from venturepay.adapters.sqlalchemy.mappings import start_mappers
from venturepay.adapters.sqlalchemy.migrations import upgrade_head
from venturepay.adapters.sqlalchemy.repositories import (
    SqlAlchemyFulfillmentRecordRepository,
    SqlAlchemyItemRepository,
    SqlAlchemyOfferRepository,
    SqlAlchemyPlayerInventoryRepository,
    SqlAlchemyPlayerUIStateRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyVerificationCodeRepository,
)
from venturepay.config.storage import get_database_uri
from venturepay.domain.errors import StoreUnavailableError
from venturepay.domain.ports.unit_of_work import (
    RepositoryCollection,
    ShopRepositories,
    VerificationRepositories,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the store is used before ``startup()`` or configured twice."""


@dataclass(slots=True)
class _Store:
    engine: Engine
    sessions: sessionmaker[Session]


_store: _Store | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the store to an engine and bring its schema to the latest revision."""

    global _store  # noqa: PLW0603
    if _store is not None and not force:
        raise StartupError("Store already started. Pass force=True to rebind it.")

    bound = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=bound)
    _store = _Store(engine=bound, sessions=sessionmaker(bind=bound, expire_on_commit=False))


def configured_engine() -> Engine | None:
    return _store.engine if _store is not None else None


def is_started() -> bool:
    return _store is not None


def shutdown() -> None:
    """Dispose the engine and forget it; a later ``startup()`` may rebind."""

    global _store  # noqa: PLW0603
    if _store is not None:
        _store.engine.dispose()
    _store = None


def _sessions() -> sessionmaker[Session]:
    if _store is None:
        raise StartupError(
            "Store not started. Call venturepay.adapters.sqlalchemy.startup() "
            "before opening a unit of work."
        )
    return _store.sessions


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; nothing is written without ``commit()``.

    Any ``SQLAlchemyError`` escaping the block is rolled back and re-raised as
    ``StoreUnavailableError``; domain errors pass through unchanged.
    """

    def __init__(self) -> None:
        self._sessions = _sessions()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session, self._session, self._repositories = self.session, None, None
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
        if isinstance(exc_value, SQLAlchemyError):
            raise StoreUnavailableError(f"Store operation failed: {exc_value}") from exc_value
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session


class SqlAlchemyShopUnitOfWork(BaseSqlAlchemyUnitOfWork[ShopRepositories]):
    """Unit of work for checkout, reconciliation and fulfillment."""

    def _build_repositories(self, session: Session) -> ShopRepositories:
        return ShopRepositories(
            transactions=SqlAlchemyTransactionRepository(session),
            items=SqlAlchemyItemRepository(session),
            offers=SqlAlchemyOfferRepository(session),
            inventories=SqlAlchemyPlayerInventoryRepository(session),
            ui_states=SqlAlchemyPlayerUIStateRepository(session),
            fulfillment_records=SqlAlchemyFulfillmentRecordRepository(session),
        )


class SqlAlchemyVerificationUnitOfWork(BaseSqlAlchemyUnitOfWork[VerificationRepositories]):
    def _build_repositories(self, session: Session) -> VerificationRepositories:
        return VerificationRepositories(
            verification_codes=SqlAlchemyVerificationCodeRepository(session),
        )


if TYPE_CHECKING:
    from venturepay.domain.ports.unit_of_work import ShopUnitOfWork, VerificationUnitOfWork

    _uow_shop_check: ShopUnitOfWork = SqlAlchemyShopUnitOfWork()
    _uow_verify_check: VerificationUnitOfWork = SqlAlchemyVerificationUnitOfWork()
