from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from venturepay.domain.errors import TransactionNotFoundError
from venturepay.domain.model import PaymentEvent, Transaction, TransactionStatus
from venturepay.domain.webhooks import (
    apply_status,
    classify_outcome,
    locate_transactions,
    should_fulfill,
)
from tests.helpers.catalog import make_transaction

NOW = datetime(2025, 3, 14, 9, 30, tzinfo=UTC)


class _InMemoryTransactions:
    def __init__(self, *transactions: Transaction) -> None:
        self.transactions = list(transactions)

    def find_by_reference(self, reference_id: str) -> list[Transaction]:
        return [t for t in self.transactions if t.reference_id == reference_id]


def _event(provider_status: str) -> PaymentEvent:
    return PaymentEvent(event_type=None, reference_id="cs_1", provider_status=provider_status)


def test_locate_raises_when_nothing_matches() -> None:
    with pytest.raises(TransactionNotFoundError) as exc_info:
        locate_transactions("cs_1", _InMemoryTransactions())  # type: ignore[arg-type]

    assert exc_info.value.reference_id == "cs_1"


def test_locate_returns_every_duplicate_and_warns(caplog: pytest.LogCaptureFixture) -> None:
    first = make_transaction("cs_1")
    second = make_transaction("cs_1")
    repository = _InMemoryTransactions(first, second, make_transaction("cs_2"))

    with caplog.at_level(logging.WARNING):
        matches = locate_transactions("cs_1", repository)  # type: ignore[arg-type]

    assert matches == [first, second]
    assert "matches 2 transactions" in caplog.text


@pytest.mark.parametrize(
    ("provider_status", "expected"),
    [
        ("paid", TransactionStatus.PAID),
        ("failed", TransactionStatus.FAILED),
        ("refunded", TransactionStatus.REFUNDED),
        ("processing", TransactionStatus.PENDING),
        ("awaiting_payment_method", TransactionStatus.PENDING),
        ("awaiting_next_action", TransactionStatus.PENDING),
        ("unknown", TransactionStatus.UNKNOWN),
        ("cancelled", TransactionStatus.UNKNOWN),
    ],
)
def test_classify_outcome(provider_status: str, expected: TransactionStatus) -> None:
    assert classify_outcome(provider_status) is expected


def test_apply_status_overwrites_even_terminal_states() -> None:
    transaction = make_transaction("cs_1", status=TransactionStatus.PAID, fulfilled=True)

    status = apply_status(transaction, _event("failed"), NOW)

    assert status is TransactionStatus.FAILED
    assert transaction.status is TransactionStatus.FAILED
    assert transaction.provider_status == "failed"
    assert transaction.last_updated == NOW
    assert transaction.fulfilled is True


@pytest.mark.parametrize(
    ("status", "user_id", "offer_id", "expected"),
    [
        (TransactionStatus.PAID, "player-1", "offer-1", True),
        (TransactionStatus.PAID, None, "offer-1", False),
        (TransactionStatus.PAID, "player-1", None, False),
        (TransactionStatus.PENDING, "player-1", "offer-1", False),
        (TransactionStatus.REFUNDED, "player-1", "offer-1", False),
    ],
)
def test_should_fulfill(
    status: TransactionStatus, user_id: str | None, offer_id: str | None, expected: bool
) -> None:
    transaction = make_transaction("cs_1", status=status, user_id=user_id, offer_id=offer_id)

    assert should_fulfill(transaction) is expected
