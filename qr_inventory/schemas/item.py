"""Item Schemas — value objects for items, containers, spots and search hits.

Invariants:
    - qr_id is stripped and non-empty
    - Datetimes are always timezone-aware (naive values are read back as UTC)
    - Item.to_document() is the exact payload mirrored into the search index

Design Decisions:
    - from_attributes=True: built straight from ORM rows via model_validate
    - parent_id is a plain id string: it may point at an item or a container
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from qr_inventory.core.domain_types import Area, QrColor, Storage


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(v: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class Item(BaseModel):
    """A tracked fixture/equipment unit."""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    qr_id: str = Field(min_length=1, max_length=64)
    qr_color: QrColor
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    model_number: str | None = None
    storage: Storage
    usage: str | None = None
    usage_season: str | None = None
    note: str = ""
    parent_id: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("qr_id")
    @classmethod
    def strip_qr_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("qr_id cannot be empty or whitespace")
        return v

    @field_validator("created_at")
    @classmethod
    def aware_created_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


class Container(BaseModel):
    """A storage case; items may name it as their parent."""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    qr_id: str = Field(min_length=1, max_length=64)
    qr_color: QrColor
    storage: Storage
    description: str | None = None
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("created_at")
    @classmethod
    def aware_created_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class Spot(BaseModel):
    """A named place where lent items are used."""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    name: str = Field(min_length=1, max_length=200)
    area: Area
    building: str | None = None
    floor: int | None = Field(None, ge=0)
    room: str | None = None


class SearchHit(BaseModel):
    """One item returned by the search index, with its ranking score."""
    item: Item
    ranking: float | None = None
