"""Read-only catalog reference data: items and offers."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import RewardCategory


@dataclass(eq=False, kw_only=True)
class Item:
    id: str
    category: RewardCategory = RewardCategory.GENERIC
    description: str = ""


@dataclass(eq=False, kw_only=True)
class OfferItem:
    """One ``(item_id, quantity)`` line of an offer; ``position`` keeps catalog order."""

    item_id: str
    quantity: int = 1
    position: int = 0


@dataclass(eq=False, kw_only=True)
class Offer:
    id: str
    title: str
    is_bundle: bool = False
    items: list[OfferItem] = field(default_factory=list["OfferItem"])

    def add_item(self, item_id: str, quantity: int = 1) -> OfferItem:
        if quantity < 1:
            raise ValueError(f"Offer line quantity must be positive, got {quantity}")
        if any(line.item_id == item_id for line in self.items):
            raise ValueError(f"Item {item_id} already listed in offer {self.id}")
        line = OfferItem(item_id=item_id, quantity=quantity, position=len(self.items))
        self.items.append(line)
        return line

    @property
    def ordered_items(self) -> list[OfferItem]:
        return sorted(self.items, key=lambda line: line.position)
