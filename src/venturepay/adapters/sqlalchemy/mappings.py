"""SQLAlchemy mapping metadata for the venturepay domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import attribute_keyed_dict, configure_mappers, relationship

from venturepay.domain.model import (
    FulfillmentRecord,
    InventoryEntry,
    Item,
    Offer,
    OfferItem,
    PlayerInventory,
    PlayerUIState,
    RewardCategory,
    Transaction,
    TransactionStatus,
    VerificationCode,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog ---------------------------------------------------------------------

item_table = Table(
    "items",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("category", Enum(RewardCategory, native_enum=False), nullable=False),
    Column("description", String, nullable=False, default=""),
)

offer_table = Table(
    "offers",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("is_bundle", Boolean, nullable=False, default=False),
)

# No foreign key to items: offers may reference items that have left the catalog.
offer_item_table = Table(
    "offer_items",
    mapper_registry.metadata,
    Column("offer_id", String, ForeignKey("offers.id", ondelete="CASCADE"), primary_key=True),
    Column("item_id", String, primary_key=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("position", Integer, nullable=False, default=0),
)

# Purchases -------------------------------------------------------------------

transaction_table = Table(
    "transactions",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("reference_id", String, nullable=False, unique=True),
    Column("user_id", String, nullable=True),
    Column("offer_id", String, nullable=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("status", Enum(TransactionStatus, native_enum=False), nullable=False),
    Column("provider_status", String, nullable=True),
    Column("fulfilled", Boolean, nullable=False, default=False),
    Column("fulfilled_at", UTCDateTime(), nullable=True),
    Column("checkout_session_id", String, nullable=True),
    Column("description", String, nullable=True),
    Column("amount", Integer, nullable=True),
    Column("currency", String(3), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("last_updated", UTCDateTime(), nullable=False),
)

fulfillment_record_table = Table(
    "fulfillment_records",
    mapper_registry.metadata,
    Column(
        "transaction_id",
        UUIDColumnType,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("category", Enum(RewardCategory, native_enum=False), primary_key=True),
    Column("quantity", Integer, nullable=False),
    Column("applied_at", UTCDateTime(), nullable=False),
)

# Player documents ------------------------------------------------------------

player_inventory_table = Table(
    "player_inventory",
    mapper_registry.metadata,
    Column("user_id", String, primary_key=True),
    Column("gems", Integer, nullable=False, default=0),
    Column("hints", Integer, nullable=False, default=0),
    Column("last_updated", UTCDateTime(), nullable=True),
)

inventory_entry_table = Table(
    "inventory_entries",
    mapper_registry.metadata,
    Column(
        "user_id",
        String,
        ForeignKey("player_inventory.user_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("entry_id", String, primary_key=True),
    Column("quantity", Integer, nullable=False, default=0),
    Column("description", String, nullable=False, default=""),
    Column("last_updated", UTCDateTime(), nullable=True),
)

player_ui_state_table = Table(
    "player_ui_state",
    mapper_registry.metadata,
    Column("user_id", String, primary_key=True),
    Column("current_hearts", Integer, nullable=False),
    Column("half_step", Boolean, nullable=False, default=False),
    Column("last_updated", UTCDateTime(), nullable=True),
)

# Verification ----------------------------------------------------------------

verification_code_table = Table(
    "verification_codes",
    mapper_registry.metadata,
    Column("subject", String, primary_key=True),
    Column("email", String, nullable=False),
    Column("code_hash", String(64), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
    Column("attempts", Integer, nullable=False, default=0),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Item, item_table)

    mapper_registry.map_imperatively(OfferItem, offer_item_table)

    mapper_registry.map_imperatively(
        Offer,
        offer_table,
        properties={
            "items": relationship(
                OfferItem,
                cascade="all, delete-orphan",
                order_by=offer_item_table.c.position,
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(Transaction, transaction_table)

    mapper_registry.map_imperatively(FulfillmentRecord, fulfillment_record_table)

    mapper_registry.map_imperatively(InventoryEntry, inventory_entry_table)

    mapper_registry.map_imperatively(
        PlayerInventory,
        player_inventory_table,
        properties={
            "entries": relationship(
                InventoryEntry,
                collection_class=attribute_keyed_dict("entry_id"),
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(PlayerUIState, player_ui_state_table)

    mapper_registry.map_imperatively(VerificationCode, verification_code_table)

    configure_mappers()
    return mapper_registry
