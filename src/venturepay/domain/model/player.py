"""Per-player documents mutated by fulfillment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import RewardCategory


@dataclass(eq=False, kw_only=True)
class InventoryEntry:
    entry_id: str
    quantity: int = 0
    description: str = ""
    last_updated: datetime | None = None


@dataclass(eq=False, kw_only=True)
class PlayerInventory:
    user_id: str
    gems: int = 0
    hints: int = 0
    entries: dict[str, InventoryEntry] = field(default_factory=dict[str, "InventoryEntry"])
    last_updated: datetime | None = None

    def quantity_of(self, entry_id: str) -> int:
        entry = self.entries.get(entry_id)
        return entry.quantity if entry is not None else 0


@dataclass(eq=False, kw_only=True)
class PlayerUIState:
    user_id: str
    current_hearts: int
    half_step: bool = False
    last_updated: datetime | None = None


@dataclass(eq=False, kw_only=True)
class FulfillmentRecord:
    """Ledger row proving one reward category of a transaction was granted."""

    transaction_id: UUID
    category: RewardCategory
    quantity: int
    applied_at: datetime
