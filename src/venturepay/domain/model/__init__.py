"""Public domain model surface."""

from __future__ import annotations

from .catalog import Item, Offer, OfferItem
from .enums import (
    FulfillmentStatus,
    PaymentOutcome,
    RewardCategory,
    TransactionStatus,
    VerificationResult,
    WebhookOutcome,
)
from .events import PaymentEvent
from .player import FulfillmentRecord, InventoryEntry, PlayerInventory, PlayerUIState
from .primitives import Clock, ItemId, OfferId, ReferenceId, UserId, utc_now
from .transaction import Transaction
from .verification import VerificationCode

__all__ = [
    "Clock",
    "FulfillmentRecord",
    "FulfillmentStatus",
    "InventoryEntry",
    "Item",
    "ItemId",
    "Offer",
    "OfferId",
    "OfferItem",
    "PaymentEvent",
    "PaymentOutcome",
    "PlayerInventory",
    "PlayerUIState",
    "ReferenceId",
    "RewardCategory",
    "Transaction",
    "TransactionStatus",
    "UserId",
    "VerificationCode",
    "VerificationResult",
    "WebhookOutcome",
    "utc_now",
]
