from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from venturepay.domain.model import (
    Offer,
    PaymentEvent,
    Transaction,
    TransactionStatus,
    VerificationCode,
)

NOW = datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


def test_offer_lines_keep_insertion_position() -> None:
    offer = Offer(id="offer-1", title="Bundle")
    offer.add_item("gem_small", 10)
    offer.add_item("scroll")

    assert [(line.item_id, line.quantity, line.position) for line in offer.ordered_items] == [
        ("gem_small", 10, 0),
        ("scroll", 1, 1),
    ]


def test_offer_rejects_duplicate_and_non_positive_lines() -> None:
    offer = Offer(id="offer-1", title="Bundle")
    offer.add_item("gem_small", 10)

    with pytest.raises(ValueError, match="already listed"):
        offer.add_item("gem_small", 1)
    with pytest.raises(ValueError, match="positive"):
        offer.add_item("scroll", 0)


def test_transaction_requires_reference_and_positive_quantity() -> None:
    with pytest.raises(ValueError):
        Transaction(reference_id="", created_at=NOW, last_updated=NOW)
    with pytest.raises(ValueError):
        Transaction(reference_id="cs_1", quantity=0, created_at=NOW, last_updated=NOW)


def test_record_status_leaves_fulfilled_alone() -> None:
    transaction = Transaction(
        reference_id="cs_1", fulfilled=True, created_at=NOW, last_updated=NOW
    )
    later = NOW + timedelta(minutes=5)

    transaction.record_status(TransactionStatus.REFUNDED, "refunded", later)

    assert transaction.status is TransactionStatus.REFUNDED
    assert transaction.provider_status == "refunded"
    assert transaction.last_updated == later
    assert transaction.fulfilled is True


def test_payment_event_requires_reference() -> None:
    with pytest.raises(ValueError):
        PaymentEvent(event_type="payment.paid", reference_id="", provider_status="paid")


def test_verification_code_expiry_is_inclusive() -> None:
    code = VerificationCode(
        subject="player-1",
        email="p@example.com",
        code_hash="x",
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=10),
    )

    assert not code.is_expired(NOW + timedelta(minutes=9))
    assert code.is_expired(NOW + timedelta(minutes=10))
