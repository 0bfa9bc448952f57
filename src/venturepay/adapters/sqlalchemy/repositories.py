"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from venturepay.adapters.sqlalchemy.mappings import (
    fulfillment_record_table,
    inventory_entry_table,
    player_inventory_table,
    player_ui_state_table,
    transaction_table,
)
from venturepay.domain.errors import DuplicateGrantError
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

    from sqlalchemy.engine import CursorResult, Result
    from sqlalchemy.orm import Session


def _rowcount(result: Result[Any]) -> int:
    return cast("CursorResult[Any]", result).rowcount


class SqlAlchemyTransactionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Transaction) -> None:
        self.session.add(entity)

    def get(self, transaction_id: UUID) -> Transaction | None:
        return self.session.get(Transaction, transaction_id)

    def find_by_reference(self, reference_id: str) -> list[Transaction]:
        stmt = select(Transaction).where(transaction_table.c.reference_id == reference_id)
        return list(self.session.scalars(stmt).all())

    def mark_fulfilled(self, transaction_id: UUID, *, at: datetime) -> bool:
        stmt = (
            update(transaction_table)
            .where(transaction_table.c.id == transaction_id)
            .where(transaction_table.c.fulfilled.is_(False))
            .values(fulfilled=True, fulfilled_at=at, last_updated=at)
        )
        return _rowcount(self.session.execute(stmt)) == 1


class SqlAlchemyItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Item) -> None:
        self.session.merge(entity)

    def get(self, item_id: str) -> Item | None:
        return self.session.get(Item, item_id)


class SqlAlchemyOfferRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Offer) -> None:
        existing = self.session.get(Offer, entity.id)
        if existing is not None:
            self.session.delete(existing)
            self.session.flush()
        self.session.add(entity)

    def get(self, offer_id: str) -> Offer | None:
        return self.session.get(Offer, offer_id)


class SqlAlchemyPlayerInventoryRepository:
    """Counters and entries are changed with single SQL statements.

    Read-modify-write through the ORM would lose concurrent grants to the same player.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PlayerInventory) -> None:
        self.session.add(entity)

    def get(self, user_id: str) -> PlayerInventory | None:
        return self.session.get(PlayerInventory, user_id)

    def increment_counters(
        self, user_id: str, *, gems: int = 0, hints: int = 0, at: datetime
    ) -> None:
        table = player_inventory_table
        stmt = (
            update(table)
            .where(table.c.user_id == user_id)
            .values(gems=table.c.gems + gems, hints=table.c.hints + hints, last_updated=at)
        )
        if _rowcount(self.session.execute(stmt)) == 0:
            self.session.execute(
                insert(table).values(user_id=user_id, gems=gems, hints=hints, last_updated=at)
            )

    def add_entry(
        self, user_id: str, entry_id: str, *, quantity: int, description: str, at: datetime
    ) -> None:
        self._ensure_document(user_id, at=at)
        table = inventory_entry_table
        stmt = (
            update(table)
            .where(table.c.user_id == user_id)
            .where(table.c.entry_id == entry_id)
            .values(quantity=table.c.quantity + quantity, description=description, last_updated=at)
        )
        if _rowcount(self.session.execute(stmt)) == 0:
            self.session.execute(
                insert(table).values(
                    user_id=user_id,
                    entry_id=entry_id,
                    quantity=quantity,
                    description=description,
                    last_updated=at,
                )
            )

    def _ensure_document(self, user_id: str, *, at: datetime) -> None:
        table = player_inventory_table
        stmt = select(table.c.user_id).where(table.c.user_id == user_id)
        if self.session.execute(stmt).scalar_one_or_none() is None:
            self.session.execute(
                insert(table).values(user_id=user_id, gems=0, hints=0, last_updated=at)
            )


class SqlAlchemyPlayerUIStateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PlayerUIState) -> None:
        self.session.add(entity)

    def get(self, user_id: str) -> PlayerUIState | None:
        return self.session.get(PlayerUIState, user_id)

    def reset_stamina(self, user_id: str, *, max_hearts: int, at: datetime) -> None:
        table = player_ui_state_table
        stmt = (
            update(table)
            .where(table.c.user_id == user_id)
            .values(current_hearts=max_hearts, half_step=False, last_updated=at)
        )
        if _rowcount(self.session.execute(stmt)) == 0:
            self.session.execute(
                insert(table).values(
                    user_id=user_id,
                    current_hearts=max_hearts,
                    half_step=False,
                    last_updated=at,
                )
            )


class SqlAlchemyFulfillmentRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: FulfillmentRecord) -> None:
        stmt = insert(fulfillment_record_table).values(
            transaction_id=entity.transaction_id,
            category=entity.category,
            quantity=entity.quantity,
            applied_at=entity.applied_at,
        )
        try:
            self.session.execute(stmt)
        except IntegrityError as exc:
            raise DuplicateGrantError(
                f"{entity.category} already granted for transaction {entity.transaction_id}"
            ) from exc

    def list_for(self, transaction_id: UUID) -> list[FulfillmentRecord]:
        stmt = select(FulfillmentRecord).where(
            fulfillment_record_table.c.transaction_id == transaction_id
        )
        return list(self.session.scalars(stmt).all())


class SqlAlchemyVerificationCodeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VerificationCode) -> None:
        self.session.merge(entity)

    def get(self, subject: str) -> VerificationCode | None:
        return self.session.get(VerificationCode, subject)

    def remove(self, subject: str) -> None:
        code = self.session.get(VerificationCode, subject)
        if code is not None:
            self.session.delete(code)


if TYPE_CHECKING:
    from venturepay.domain.ports.persistence import (
        FulfillmentRecordRepository,
        ItemRepository,
        OfferRepository,
        PlayerInventoryRepository,
        PlayerUIStateRepository,
        TransactionRepository,
        VerificationCodeRepository,
    )

    def _check(session: Session) -> None:
        _tx: TransactionRepository = SqlAlchemyTransactionRepository(session)
        _items: ItemRepository = SqlAlchemyItemRepository(session)
        _offers: OfferRepository = SqlAlchemyOfferRepository(session)
        _inv: PlayerInventoryRepository = SqlAlchemyPlayerInventoryRepository(session)
        _ui: PlayerUIStateRepository = SqlAlchemyPlayerUIStateRepository(session)
        _rec: FulfillmentRecordRepository = SqlAlchemyFulfillmentRecordRepository(session)
        _codes: VerificationCodeRepository = SqlAlchemyVerificationCodeRepository(session)
