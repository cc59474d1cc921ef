"""Spot ORM — named places items are lent out to. The name is the primary key."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from qr_inventory.db.base import Base


class Spot(Base):
    __tablename__ = "spots"

    name: Mapped[str] = mapped_column(String(200), primary_key=True)
    area: Mapped[str] = mapped_column(String(20), nullable=False)
    building: Mapped[str | None] = mapped_column(String(100), nullable=True)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
