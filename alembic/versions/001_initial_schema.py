"""Initial schema — items, containers, spots, lendings, credentials.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

The two partial unique indexes on lendings are what stop two concurrent
lends of the same item (or the same QR sticker) from both committing.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_OPEN = sa.text("returned_at IS NULL")


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("qr_id", sa.String(64), nullable=False, unique=True),
        sa.Column("qr_color", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("model_number", sa.String(200), nullable=True),
        sa.Column("storage", sa.String(20), nullable=False),
        sa.Column("usage", sa.Text, nullable=True),
        sa.Column("usage_season", sa.Text, nullable=True),
        sa.Column("note", sa.Text, nullable=False, server_default=""),
        sa.Column("parent_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_items_name", "items", ["name"])
    op.create_index("ix_items_parent_id", "items", ["parent_id"])

    op.create_table(
        "containers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("qr_id", sa.String(64), nullable=False, unique=True),
        sa.Column("qr_color", sa.String(20), nullable=False),
        sa.Column("storage", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "spots",
        sa.Column("name", sa.String(200), primary_key=True),
        sa.Column("area", sa.String(20), nullable=False),
        sa.Column("building", sa.String(100), nullable=True),
        sa.Column("floor", sa.Integer, nullable=True),
        sa.Column("room", sa.String(100), nullable=True),
    )

    op.create_table(
        "lendings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("item_id", UUID(as_uuid=True), nullable=False),
        sa.Column("item_qr_id", sa.String(64), nullable=False),
        sa.Column("spot_name", sa.String(200), nullable=False),
        sa.Column("lending_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("returned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("borrower_name", sa.String(200), nullable=False),
        sa.Column("borrower_number", sa.Integer, nullable=False),
        sa.Column("borrower_org", sa.String(200), nullable=True),
    )
    op.create_index("ix_lendings_item_id", "lendings", ["item_id"])
    op.create_index(
        "uq_lendings_open_item", "lendings", ["item_id"],
        unique=True, postgresql_where=_OPEN,
    )
    op.create_index(
        "uq_lendings_open_qr", "lendings", ["item_qr_id"],
        unique=True, postgresql_where=_OPEN,
    )

    op.create_table(
        "credentials",
        sa.Column("token", sa.String(400), primary_key=True),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("limit_days", sa.Integer, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("credentials")
    op.drop_index("uq_lendings_open_qr", table_name="lendings")
    op.drop_index("uq_lendings_open_item", table_name="lendings")
    op.drop_index("ix_lendings_item_id", table_name="lendings")
    op.drop_table("lendings")
    op.drop_table("spots")
    op.drop_table("containers")
    op.drop_index("ix_items_parent_id", table_name="items")
    op.drop_index("ix_items_name", table_name="items")
    op.drop_table("items")
