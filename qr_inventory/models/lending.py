"""Lending ORM — one borrow record, open until returned_at is set.

Invariants:
    - At most one open row (returned_at IS NULL) per item_id
    - At most one open row per item_qr_id, independently of item_id
    - Both enforced by partial unique indexes, so the losing side of two
      concurrent lends fails at commit with an IntegrityError
    - item_qr_id and spot_name are lend-time snapshots; they never follow later edits

Design Decisions:
    - item_id is not a foreign key: history outlives deleted items
    - postgresql_where and sqlite_where carry the same predicate so the test
      database enforces the constraint exactly like production
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from qr_inventory.db.base import Base

OPEN_LENDING = text("returned_at IS NULL")


class Lending(Base):
    __tablename__ = "lendings"
    __table_args__ = (
        Index(
            "uq_lendings_open_item", "item_id", unique=True,
            postgresql_where=OPEN_LENDING, sqlite_where=OPEN_LENDING,
        ),
        Index(
            "uq_lendings_open_qr", "item_qr_id", unique=True,
            postgresql_where=OPEN_LENDING, sqlite_where=OPEN_LENDING,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    item_qr_id: Mapped[str] = mapped_column(String(64), nullable=False)
    spot_name: Mapped[str] = mapped_column(String(200), nullable=False)
    lending_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    returned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    borrower_name: Mapped[str] = mapped_column(String(200), nullable=False)
    borrower_number: Mapped[int] = mapped_column(Integer, nullable=False)
    borrower_org: Mapped[str | None] = mapped_column(String(200), nullable=True)
