"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from venturepay.domain.ports.persistence import (
        FulfillmentRecordRepository,
        ItemRepository,
        OfferRepository,
        PlayerInventoryRepository,
        PlayerUIStateRepository,
        TransactionRepository,
        VerificationCodeRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    Leaving the context with a persistence failure raises ``StoreUnavailableError``.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ShopRepositories(RepositoryCollection):
    """Repositories touched by checkout, reconciliation and fulfillment."""

    transactions: TransactionRepository
    items: ItemRepository
    offers: OfferRepository
    inventories: PlayerInventoryRepository
    ui_states: PlayerUIStateRepository
    fulfillment_records: FulfillmentRecordRepository


@dataclass(slots=True)
class VerificationRepositories(RepositoryCollection):
    """Repositories used by email verification."""

    verification_codes: VerificationCodeRepository


type ShopUnitOfWork = UnitOfWork[ShopRepositories]
type VerificationUnitOfWork = UnitOfWork[VerificationRepositories]
