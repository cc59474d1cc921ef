"""Credential ORM — issued bearer tokens.

Invariants:
    - token is the primary key (point lookup on every guarded call)
    - Rows are never updated; expired rows stay until removed by hand
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from qr_inventory.db.base import Base


class Credential(Base):
    __tablename__ = "credentials"

    token: Mapped[str] = mapped_column(String(400), primary_key=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    limit_days: Mapped[int] = mapped_column(Integer, nullable=False)
