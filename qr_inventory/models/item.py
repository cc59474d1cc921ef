"""Item ORM — persists a tracked fixture/equipment unit.

Invariants:
    - id is UUID primary key
    - qr_id is unique across items at any instant, but may be reassigned by update
    - qr_color and storage store the str Enum values as text
    - parent_id is a free id reference (item or container), not a foreign key

Design Decisions:
    - Enums as String columns: no database enum types to migrate when colors/rooms change
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from qr_inventory.db.base import Base


class Item(Base):
    """Registry row for one item."""
    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    qr_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True,
    )
    qr_color: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    model_number: Mapped[str | None] = mapped_column(String(200), nullable=True)
    storage: Mapped[str] = mapped_column(String(20), nullable=False)
    usage: Mapped[str | None] = mapped_column(Text, nullable=True)
    usage_season: Mapped[str | None] = mapped_column(Text, nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    parent_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
