"""Ports for persisting transactions, catalog data and player documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from venturepay.domain.model import (
    FulfillmentRecord,
    Item,
    Offer,
    PlayerInventory,
    PlayerUIState,
    Transaction,
    VerificationCode,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class TransactionRepository(Repository[Transaction], Protocol):
    """Persistence contract for purchase transactions."""

    def get(self, transaction_id: UUID) -> Transaction | None: ...

    def find_by_reference(self, reference_id: str) -> list[Transaction]: ...

    def mark_fulfilled(self, transaction_id: UUID, *, at: datetime) -> bool:
        """Set ``fulfilled`` only if it is still false; return whether this call won."""
        ...


@runtime_checkable
class ItemRepository(Repository[Item], Protocol):
    """Read access to the item catalog."""

    def get(self, item_id: str) -> Item | None: ...


@runtime_checkable
class OfferRepository(Repository[Offer], Protocol):
    """Read access to the offer catalog."""

    def get(self, offer_id: str) -> Offer | None: ...


@runtime_checkable
class PlayerInventoryRepository(Repository[PlayerInventory], Protocol):
    """Merge-style writes against per-player inventory documents."""

    def get(self, user_id: str) -> PlayerInventory | None: ...

    def increment_counters(
        self, user_id: str, *, gems: int = 0, hints: int = 0, at: datetime
    ) -> None: ...

    def add_entry(
        self, user_id: str, entry_id: str, *, quantity: int, description: str, at: datetime
    ) -> None: ...


@runtime_checkable
class PlayerUIStateRepository(Repository[PlayerUIState], Protocol):
    """Merge-style writes against per-player UI state documents."""

    def get(self, user_id: str) -> PlayerUIState | None: ...

    def reset_stamina(self, user_id: str, *, max_hearts: int, at: datetime) -> None: ...


@runtime_checkable
class FulfillmentRecordRepository(Repository[FulfillmentRecord], Protocol):
    """Ledger of granted reward categories; ``add`` raises ``DuplicateGrantError``."""

    def list_for(self, transaction_id: UUID) -> list[FulfillmentRecord]: ...


@runtime_checkable
class VerificationCodeRepository(Repository[VerificationCode], Protocol):
    """Expiring verification codes keyed by subject."""

    def get(self, subject: str) -> VerificationCode | None: ...

    def remove(self, subject: str) -> None: ...
