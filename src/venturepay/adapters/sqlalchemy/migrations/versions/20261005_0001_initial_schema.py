"""initial schema

Revision ID: 3c1f9a7d2b80
Revises:
Create Date: 2026-10-05 09:12:44.318204

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

import venturepay.adapters.sqlalchemy.mappings

revision: str = "3c1f9a7d2b80"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

REWARD_CATEGORY = sa.Enum(
    "GEM", "HINT", "STAMINA", "GENERIC", name="rewardcategory", native_enum=False
)
TRANSACTION_STATUS = sa.Enum(
    "PENDING", "PAID", "FAILED", "REFUNDED", "UNKNOWN", name="transactionstatus", native_enum=False
)


def upgrade() -> None:
    utc = venturepay.adapters.sqlalchemy.mappings.UTCDateTime

    op.create_table(
        "items",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("category", REWARD_CATEGORY, nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_items")),
    )
    op.create_table(
        "offers",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("is_bundle", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_offers")),
    )
    op.create_table(
        "offer_items",
        sa.Column("offer_id", sa.String(), nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["offer_id"],
            ["offers.id"],
            name=op.f("fk_offer_items_offer_id_offers"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("offer_id", "item_id", name=op.f("pk_offer_items")),
    )
    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("offer_id", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", TRANSACTION_STATUS, nullable=False),
        sa.Column("provider_status", sa.String(), nullable=True),
        sa.Column("fulfilled", sa.Boolean(), nullable=False),
        sa.Column("fulfilled_at", utc(), nullable=True),
        sa.Column("checkout_session_id", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("created_at", utc(), nullable=False),
        sa.Column("last_updated", utc(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_transactions")),
        sa.UniqueConstraint("reference_id", name=op.f("uq_transactions_reference_id")),
    )
    op.create_table(
        "fulfillment_records",
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("category", REWARD_CATEGORY, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("applied_at", utc(), nullable=False),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["transactions.id"],
            name=op.f("fk_fulfillment_records_transaction_id_transactions"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "transaction_id", "category", name=op.f("pk_fulfillment_records")
        ),
    )
    op.create_table(
        "player_inventory",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("gems", sa.Integer(), nullable=False),
        sa.Column("hints", sa.Integer(), nullable=False),
        sa.Column("last_updated", utc(), nullable=True),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_player_inventory")),
    )
    op.create_table(
        "inventory_entries",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("entry_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("last_updated", utc(), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["player_inventory.user_id"],
            name=op.f("fk_inventory_entries_user_id_player_inventory"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("user_id", "entry_id", name=op.f("pk_inventory_entries")),
    )
    op.create_table(
        "player_ui_state",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("current_hearts", sa.Integer(), nullable=False),
        sa.Column("half_step", sa.Boolean(), nullable=False),
        sa.Column("last_updated", utc(), nullable=True),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_player_ui_state")),
    )
    op.create_table(
        "verification_codes",
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("code_hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", utc(), nullable=False),
        sa.Column("expires_at", utc(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("subject", name=op.f("pk_verification_codes")),
    )


def downgrade() -> None:
    op.drop_table("verification_codes")
    op.drop_table("player_ui_state")
    op.drop_table("inventory_entries")
    op.drop_table("player_inventory")
    op.drop_table("fulfillment_records")
    op.drop_table("transactions")
    op.drop_table("offer_items")
    op.drop_table("offers")
    op.drop_table("items")
