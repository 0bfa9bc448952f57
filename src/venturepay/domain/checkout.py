"""Record purchase transactions for freshly created checkout sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from venturepay.domain.model import Transaction, TransactionStatus, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable

    from venturepay.domain.model import Clock
    from venturepay.domain.ports.gateways import CheckoutRequest, CheckoutSession
    from venturepay.domain.ports.unit_of_work import ShopUnitOfWork

log = getLogger(__name__)


def record_checkout_transaction(
    session: CheckoutSession,
    request: CheckoutRequest,
    *,
    unit_of_work_factory: Callable[[], ShopUnitOfWork],
    user_id: str | None = None,
    offer_id: str | None = None,
    currency: str | None = None,
    clock: Clock = utc_now,
) -> Transaction:
    """Persist a ``pending`` transaction keyed by the session's reference id.

    This must complete before the checkout URL is handed to the player, so that
    the provider's webhook always finds its transaction.
    """

    now = clock()
    transaction = Transaction(
        reference_id=session.reference_id,
        user_id=user_id,
        offer_id=offer_id,
        quantity=request.quantity,
        status=TransactionStatus.PENDING,
        checkout_session_id=session.session_id,
        description=request.name,
        amount=request.amount,
        currency=currency,
        created_at=now,
        last_updated=now,
    )
    with unit_of_work_factory() as uow:
        uow.repositories.transactions.add(transaction)
        uow.commit()

    log.info(
        "Recorded pending transaction %s (reference %s, offer %s, player %s)",
        transaction.id,
        transaction.reference_id,
        offer_id,
        user_id,
    )
    return transaction
