"""Classify normalized provider outcomes and apply them to transactions."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Final

from venturepay.domain.model import PaymentOutcome, TransactionStatus

if TYPE_CHECKING:
    from datetime import datetime

    from venturepay.domain.model import PaymentEvent, Transaction

log = getLogger(__name__)

OUTCOME_STATUSES: Final[Mapping[str, TransactionStatus]] = {
    PaymentOutcome.PAID: TransactionStatus.PAID,
    PaymentOutcome.FAILED: TransactionStatus.FAILED,
    PaymentOutcome.REFUNDED: TransactionStatus.REFUNDED,
}

# Payment-intent states that mean the customer has not finished paying yet.
PENDING_PROVIDER_STATUSES: Final[frozenset[str]] = frozenset(
    {"awaiting_payment_method", "awaiting_next_action", "processing", "pending"}
)


def classify_outcome(provider_status: str) -> TransactionStatus:
    normalized = provider_status.strip().lower()
    if normalized in OUTCOME_STATUSES:
        return OUTCOME_STATUSES[normalized]
    if normalized in PENDING_PROVIDER_STATUSES:
        return TransactionStatus.PENDING
    return TransactionStatus.UNKNOWN


def apply_status(transaction: Transaction, event: PaymentEvent, now: datetime) -> TransactionStatus:
    """Overwrite the transaction status with the event's outcome.

    The latest provider report always wins, including transitions away from
    ``paid``. The ``fulfilled`` flag is never touched here.
    """

    status = classify_outcome(event.provider_status)
    if transaction.status is not status:
        log.info(
            "Transaction %s (%s): %s -> %s",
            transaction.id,
            transaction.reference_id,
            transaction.status,
            status,
        )
    transaction.record_status(status, event.provider_status, now)
    return status


def should_fulfill(transaction: Transaction) -> bool:
    return (
        transaction.status is TransactionStatus.PAID
        and bool(transaction.user_id)
        and bool(transaction.offer_id)
    )
