"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from venturepay.adapters.paymongo import parse_payment_event
from venturepay.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyShopUnitOfWork,
    is_started,
    startup,
)
from venturepay.config import get_fulfillment_config
from venturepay.domain.model import utc_now
from venturepay.domain.ports.unit_of_work import ShopUnitOfWork
from venturepay.domain.webhooks import (
    FulfillmentEngine,
    WebhookResult,
    process_payment_webhook,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from venturepay.config import FulfillmentConfig
    from venturepay.domain.model import Clock, Item, Offer

UnitOfWorkFactory = Callable[[], ShopUnitOfWork]

log = getLogger(__name__)


def ensure_started(*, database_uri: str | None = None) -> None:
    """Start the SQLAlchemy adapter unless it is already running."""

    if not is_started():
        startup(database_uri=database_uri)


def build_fulfillment_engine(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    config: FulfillmentConfig | None = None,
    clock: Clock = utc_now,
) -> FulfillmentEngine:
    effective_config = config or get_fulfillment_config()
    return FulfillmentEngine(
        unit_of_work_factory, max_hearts=effective_config.max_hearts, clock=clock
    )


def handle_payment_webhook(
    payload: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: FulfillmentConfig | None = None,
    clock: Clock = utc_now,
) -> WebhookResult:
    """Process a PayMongo webhook body against the configured store."""

    if unit_of_work_factory is None:
        ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyShopUnitOfWork
    result = process_payment_webhook(
        payload,
        normalize=parse_payment_event,
        unit_of_work_factory=effective_uow,
        fulfillment=build_fulfillment_engine(effective_uow, config=config, clock=clock),
        clock=clock,
    )
    log.info(
        "Webhook %s: reference=%s, status=%s, matched=%s, fulfilled=%s, skipped=%s",
        result.outcome,
        result.reference_id,
        result.status,
        result.matched,
        result.fulfilled,
        result.skipped,
    )
    return result


def load_catalog(
    items: Iterable[Item],
    offers: Iterable[Offer],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[int, int]:
    """Upsert catalog items and offers; return how many of each were written."""

    if unit_of_work_factory is None:
        ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyShopUnitOfWork
    item_count = 0
    offer_count = 0
    with effective_uow() as uow:
        for item in items:
            uow.repositories.items.add(item)
            item_count += 1
        for offer in offers:
            uow.repositories.offers.add(offer)
            offer_count += 1
        uow.commit()
    log.info("Loaded catalog: %s items, %s offers", item_count, offer_count)
    return item_count, offer_count
