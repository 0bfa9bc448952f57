"""Read item and offer catalog documents from JSON files."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from venturepay.domain.model import Item, Offer, RewardCategory

if TYPE_CHECKING:
    from pathlib import Path


class CatalogFormatError(ValueError):
    """Raised when a catalog file cannot be parsed."""


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ItemDocument(_CatalogModel):
    id: str = Field(min_length=1)
    category: RewardCategory = RewardCategory.GENERIC
    description: str = ""


class OfferLineDocument(_CatalogModel):
    item_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class OfferDocument(_CatalogModel):
    id: str = Field(min_length=1)
    title: str = ""
    is_bundle: bool = False
    items: list[OfferLineDocument] = Field(default_factory=list[OfferLineDocument])


class CatalogDocument(_CatalogModel):
    items: list[ItemDocument] = Field(default_factory=list[ItemDocument])
    offers: list[OfferDocument] = Field(default_factory=list[OfferDocument])

    def to_domain(self) -> tuple[list[Item], list[Offer]]:
        items = [
            Item(id=item.id, category=item.category, description=item.description)
            for item in self.items
        ]
        offers: list[Offer] = []
        for document in self.offers:
            offer = Offer(
                id=document.id,
                title=document.title or document.id,
                is_bundle=document.is_bundle,
            )
            for line in document.items:
                offer.add_item(line.item_id, line.quantity)
            offers.append(offer)
        return items, offers


def parse_catalog(raw: object) -> tuple[list[Item], list[Offer]]:
    try:
        document = CatalogDocument.model_validate(raw)
        return document.to_domain()
    except (ValidationError, ValueError) as exc:
        raise CatalogFormatError(f"Invalid catalog document: {exc}") from exc


def read_catalog(path: Path) -> tuple[list[Item], list[Offer]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogFormatError(f"{path} is not valid JSON: {exc}") from exc
    return parse_catalog(raw)
