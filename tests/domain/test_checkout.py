from __future__ import annotations

from typing import TYPE_CHECKING

from venturepay.domain.checkout import record_checkout_transaction
from venturepay.domain.model import TransactionStatus
from venturepay.domain.ports.gateways import CheckoutRequest, CheckoutSession
from tests.helpers.clock import FIXED_NOW

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from venturepay.adapters.sqlalchemy import SqlAlchemyShopUnitOfWork


def test_checkout_records_pending_transaction_under_reference_number(
    shop_uow: Callable[[], SqlAlchemyShopUnitOfWork], fixed_clock: Callable[[], datetime]
) -> None:
    session = CheckoutSession(
        session_id="cs_abc", checkout_url="https://pay.example/cs_abc", reference_number="vp-1"
    )
    request = CheckoutRequest(name="Gem Bundle", amount=9900, quantity=2)

    transaction = record_checkout_transaction(
        session,
        request,
        unit_of_work_factory=shop_uow,
        user_id="player-1",
        offer_id="offer_bundle_a",
        currency="PHP",
        clock=fixed_clock,
    )

    with shop_uow() as uow:
        found = uow.repositories.transactions.find_by_reference("vp-1")
    assert [t.id for t in found] == [transaction.id]
    stored = found[0]
    assert stored.status is TransactionStatus.PENDING
    assert stored.fulfilled is False
    assert stored.checkout_session_id == "cs_abc"
    assert (stored.quantity, stored.amount, stored.currency) == (2, 9900, "PHP")
    assert stored.created_at == FIXED_NOW


def test_session_id_is_the_reference_when_no_reference_number(
    shop_uow: Callable[[], SqlAlchemyShopUnitOfWork],
) -> None:
    session = CheckoutSession(session_id="cs_plain", checkout_url="https://pay.example/x")

    transaction = record_checkout_transaction(
        session, CheckoutRequest(name="Hint", amount=100), unit_of_work_factory=shop_uow
    )

    assert transaction.reference_id == "cs_plain"
    assert transaction.user_id is None
