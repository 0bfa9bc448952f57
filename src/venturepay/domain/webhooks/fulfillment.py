"""Grant the rewards of a paid offer to the purchasing player exactly once.

Writes happen in a fixed order so that a crash at any point leaves a state from
which a redelivered event converges:

1. one unit of work per reward category, inserting the category's ledger row
   together with its increment (gems, hints, the generic inventory entry);
2. the stamina reset, with its own ledger row;
3. the conditional ``fulfilled`` update on the transaction.

A category whose ledger row already exists is skipped, and the conditional
update lets only one concurrent delivery report the transaction as fulfilled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, assert_never

from venturepay.domain.errors import DuplicateGrantError, ItemNotFoundError, OfferNotFoundError
from venturepay.domain.model import (
    FulfillmentRecord,
    FulfillmentStatus,
    RewardCategory,
    utc_now,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from venturepay.domain.model import Clock, Item, Offer, Transaction
    from venturepay.domain.ports.persistence import ItemRepository, OfferRepository
    from venturepay.domain.ports.unit_of_work import ShopRepositories, ShopUnitOfWork

log = getLogger(__name__)

FULL_STAMINA_HEARTS: Final[int] = 5

# Stamina is applied last, after every counter and inventory grant.
GRANT_ORDER: Final[tuple[RewardCategory, ...]] = (
    RewardCategory.GEM,
    RewardCategory.HINT,
    RewardCategory.GENERIC,
    RewardCategory.STAMINA,
)

GENERIC_DESCRIPTION_SEPARATOR: Final[str] = ", "


@dataclass(frozen=True, slots=True)
class Grant:
    """Aggregated reward of one category for one transaction."""

    category: RewardCategory
    quantity: int
    description: str = ""


@dataclass(slots=True)
class GrantPlan:
    grants: list[Grant] = field(default_factory=list[Grant])
    skipped_items: list[str] = field(default_factory=list[str])

    def quantity_of(self, category: RewardCategory) -> int:
        return sum(grant.quantity for grant in self.grants if grant.category is category)


@dataclass(slots=True)
class FulfillmentResult:
    status: FulfillmentStatus
    applied: list[Grant] = field(default_factory=list[Grant])
    already_granted: list[RewardCategory] = field(default_factory=list[RewardCategory])
    skipped_items: list[str] = field(default_factory=list[str])


def resolve_offer(offers: OfferRepository, offer_id: str) -> Offer:
    offer = offers.get(offer_id)
    if offer is None:
        raise OfferNotFoundError(offer_id)
    return offer


def resolve_item(items: ItemRepository, item_id: str) -> Item:
    item = items.get(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def plan_grants(offer: Offer, *, multiplier: int, items: ItemRepository) -> GrantPlan:
    """Aggregate an offer's lines by reward category.

    Each line grants ``line.quantity * multiplier``. Lines whose item is missing
    from the catalog are skipped; the rest of the offer is still granted.
    """

    plan = GrantPlan()
    totals: dict[RewardCategory, int] = {}
    descriptions: list[str] = []

    for line in offer.ordered_items:
        try:
            item = resolve_item(items, line.item_id)
        except ItemNotFoundError as exc:
            log.warning("Skipping line of offer %s: %s", offer.id, exc)
            plan.skipped_items.append(line.item_id)
            continue
        totals[item.category] = totals.get(item.category, 0) + line.quantity * multiplier
        if item.category is RewardCategory.GENERIC and item.description:
            descriptions.append(item.description)

    for category in GRANT_ORDER:
        if category not in totals:
            continue
        if category is RewardCategory.STAMINA:
            plan.grants.append(Grant(category=category, quantity=1))
        elif category is RewardCategory.GENERIC:
            plan.grants.append(
                Grant(
                    category=category,
                    quantity=totals[category],
                    description=GENERIC_DESCRIPTION_SEPARATOR.join(descriptions),
                )
            )
        else:
            plan.grants.append(Grant(category=category, quantity=totals[category]))
    return plan


def apply_grant(
    repositories: ShopRepositories,
    grant: Grant,
    *,
    user_id: str,
    offer_id: str,
    max_hearts: int,
    at: datetime,
) -> None:
    """Route one grant to the player document it mutates."""

    match grant.category:
        case RewardCategory.GEM:
            repositories.inventories.increment_counters(user_id, gems=grant.quantity, at=at)
        case RewardCategory.HINT:
            repositories.inventories.increment_counters(user_id, hints=grant.quantity, at=at)
        case RewardCategory.GENERIC:
            repositories.inventories.add_entry(
                user_id,
                offer_id,
                quantity=grant.quantity,
                description=grant.description,
                at=at,
            )
        case RewardCategory.STAMINA:
            repositories.ui_states.reset_stamina(user_id, max_hearts=max_hearts, at=at)
        case _:
            assert_never(grant.category)


class FulfillmentEngine:
    """Expands a paid transaction's offer into player rewards."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ShopUnitOfWork],
        *,
        max_hearts: int = FULL_STAMINA_HEARTS,
        clock: Clock = utc_now,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._max_hearts = max_hearts
        self._clock = clock

    def fulfill(self, transaction: Transaction) -> FulfillmentResult:
        user_id = transaction.user_id
        offer_id = transaction.offer_id
        if not user_id or not offer_id:
            log.info("Transaction %s has no player or offer; nothing to grant", transaction.id)
            return FulfillmentResult(status=FulfillmentStatus.NOT_ELIGIBLE)

        with self._unit_of_work_factory() as uow:
            current = uow.repositories.transactions.get(transaction.id)
            if current is None or current.fulfilled:
                log.info("Transaction %s already fulfilled; skipping", transaction.id)
                return FulfillmentResult(status=FulfillmentStatus.ALREADY_FULFILLED)
            try:
                offer = resolve_offer(uow.repositories.offers, offer_id)
            except OfferNotFoundError as exc:
                log.warning("Cannot fulfill transaction %s: %s", transaction.id, exc)
                return FulfillmentResult(status=FulfillmentStatus.OFFER_NOT_FOUND)
            plan = plan_grants(offer, multiplier=current.quantity, items=uow.repositories.items)

        at = self._clock()
        result = FulfillmentResult(
            status=FulfillmentStatus.FULFILLED, skipped_items=list(plan.skipped_items)
        )
        for grant in plan.grants:
            if self._grant_once(transaction, grant, user_id=user_id, offer_id=offer_id, at=at):
                result.applied.append(grant)
            else:
                result.already_granted.append(grant.category)

        with self._unit_of_work_factory() as uow:
            won = uow.repositories.transactions.mark_fulfilled(transaction.id, at=at)
            uow.commit()

        if not won:
            log.info("Transaction %s was fulfilled by a concurrent delivery", transaction.id)
            result.status = FulfillmentStatus.ALREADY_FULFILLED
            return result

        log.info(
            "Fulfilled transaction %s for player %s: %s",
            transaction.id,
            user_id,
            ", ".join(f"{grant.category}={grant.quantity}" for grant in result.applied) or "-",
        )
        return result

    def _grant_once(
        self,
        transaction: Transaction,
        grant: Grant,
        *,
        user_id: str,
        offer_id: str,
        at: datetime,
    ) -> bool:
        try:
            with self._unit_of_work_factory() as uow:
                uow.repositories.fulfillment_records.add(
                    FulfillmentRecord(
                        transaction_id=transaction.id,
                        category=grant.category,
                        quantity=grant.quantity,
                        applied_at=at,
                    )
                )
                apply_grant(
                    uow.repositories,
                    grant,
                    user_id=user_id,
                    offer_id=offer_id,
                    max_hearts=self._max_hearts,
                    at=at,
                )
                uow.commit()
        except DuplicateGrantError:
            log.info(
                "%s already granted for transaction %s; skipping", grant.category, transaction.id
            )
            return False
        return True
