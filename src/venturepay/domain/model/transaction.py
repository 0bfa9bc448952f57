"""Purchase transactions recorded at checkout and reconciled by webhooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from .enums import TransactionStatus

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Transaction:
    """A purchase attempt correlated to the provider by ``reference_id``.

    ``fulfilled`` only ever moves from False to True; status may be rewritten by
    any later provider event without touching it.
    """

    id: UUID = field(default_factory=uuid4)
    reference_id: str
    user_id: str | None = None
    offer_id: str | None = None
    quantity: int = 1
    status: TransactionStatus = TransactionStatus.PENDING
    provider_status: str | None = None
    fulfilled: bool = False
    fulfilled_at: datetime | None = None

    checkout_session_id: str | None = None
    description: str | None = None
    amount: int | None = None
    currency: str | None = None

    created_at: datetime
    last_updated: datetime

    def __post_init__(self) -> None:
        if not self.reference_id:
            raise ValueError("Transaction requires a reference id")
        if self.quantity < 1:
            raise ValueError(f"Transaction quantity must be positive, got {self.quantity}")

    def record_status(self, status: TransactionStatus, provider_status: str, at: datetime) -> None:
        self.status = status
        self.provider_status = provider_status
        self.last_updated = at
