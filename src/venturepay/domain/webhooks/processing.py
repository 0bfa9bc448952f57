"""Webhook control flow: normalize, locate, reconcile, fulfill."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from venturepay.domain.errors import MalformedEventError, TransactionNotFoundError
from venturepay.domain.model import FulfillmentStatus, WebhookOutcome, utc_now

from .fulfillment import FulfillmentEngine
from .locate import locate_transactions
from .reconcile import apply_status, classify_outcome, should_fulfill

if TYPE_CHECKING:
    from collections.abc import Callable

    from venturepay.domain.model import Clock, PaymentEvent, Transaction, TransactionStatus
    from venturepay.domain.ports.unit_of_work import ShopUnitOfWork

type EventNormalizer = Callable[[object], PaymentEvent]

log = getLogger(__name__)


@dataclass(slots=True)
class WebhookResult:
    """Outcome of one webhook delivery.

    ``matched`` counts located transactions; each of them ends up either
    ``fulfilled`` by this delivery or ``skipped`` (not eligible, already granted,
    offer missing).
    """

    outcome: WebhookOutcome
    reference_id: str | None = None
    event_type: str | None = None
    status: TransactionStatus | None = None
    matched: int = 0
    fulfilled: int = 0
    skipped: int = 0
    detail: str | None = None


def process_payment_webhook(
    payload: object,
    *,
    normalize: EventNormalizer,
    unit_of_work_factory: Callable[[], ShopUnitOfWork],
    fulfillment: FulfillmentEngine | None = None,
    clock: Clock = utc_now,
) -> WebhookResult:
    """Process one provider notification.

    Malformed payloads and unknown references are reported through the result
    without touching the store. ``StoreUnavailableError`` propagates so the
    provider retries the delivery.
    """

    try:
        event = normalize(payload)
    except MalformedEventError as exc:
        log.warning("Rejecting malformed webhook: %s", exc)
        return WebhookResult(outcome=WebhookOutcome.MALFORMED, detail=str(exc))

    log.info(
        "Webhook %s for reference %s (provider status %s)",
        event.event_type,
        event.reference_id,
        event.provider_status,
    )

    with unit_of_work_factory() as uow:
        try:
            matches = locate_transactions(event.reference_id, uow.repositories.transactions)
        except TransactionNotFoundError as exc:
            log.warning("%s; the checkout may not be recorded yet", exc)
            return WebhookResult(
                outcome=WebhookOutcome.NOT_FOUND,
                reference_id=event.reference_id,
                event_type=event.event_type,
                detail=str(exc),
            )

    engine = fulfillment or FulfillmentEngine(unit_of_work_factory, clock=clock)
    result = WebhookResult(
        outcome=WebhookOutcome.PROCESSED,
        reference_id=event.reference_id,
        event_type=event.event_type,
        status=classify_outcome(event.provider_status),
        matched=len(matches),
    )
    for match in matches:
        if _process_transaction(match, event, unit_of_work_factory, engine, clock):
            result.fulfilled += 1
        else:
            result.skipped += 1
    return result


def _process_transaction(
    transaction: Transaction,
    event: PaymentEvent,
    unit_of_work_factory: Callable[[], ShopUnitOfWork],
    engine: FulfillmentEngine,
    clock: Clock,
) -> bool:
    with unit_of_work_factory() as uow:
        current = uow.repositories.transactions.get(transaction.id)
        if current is None:
            log.warning("Transaction %s vanished before its status update", transaction.id)
            return False
        apply_status(current, event, clock())
        uow.commit()

    if not should_fulfill(current):
        return False
    return engine.fulfill(current).status is FulfillmentStatus.FULFILLED
