"""Domain port definitions for adapters."""

from __future__ import annotations

from .gateways import CheckoutGateway, CheckoutRequest, CheckoutSession, VerificationSender
from .persistence import (
    FulfillmentRecordRepository,
    ItemRepository,
    OfferRepository,
    PlayerInventoryRepository,
    PlayerUIStateRepository,
    Repository,
    TransactionRepository,
    VerificationCodeRepository,
)
from .unit_of_work import (
    RepositoryCollection,
    ShopRepositories,
    ShopUnitOfWork,
    UnitOfWork,
    VerificationRepositories,
    VerificationUnitOfWork,
)

__all__ = [
    "CheckoutGateway",
    "CheckoutRequest",
    "CheckoutSession",
    "FulfillmentRecordRepository",
    "ItemRepository",
    "OfferRepository",
    "PlayerInventoryRepository",
    "PlayerUIStateRepository",
    "Repository",
    "RepositoryCollection",
    "ShopRepositories",
    "ShopUnitOfWork",
    "TransactionRepository",
    "UnitOfWork",
    "VerificationCodeRepository",
    "VerificationRepositories",
    "VerificationSender",
    "VerificationUnitOfWork",
]
