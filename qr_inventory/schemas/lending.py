"""Lending Schemas — borrower input and lending records.

Invariants:
    - returned_at is None while the lending is open
    - item_qr_id and spot_name are snapshots taken at lend time
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from qr_inventory.core.domain_types import LendingState
from qr_inventory.schemas.item import ensure_aware


class Borrower(BaseModel):
    """Who takes the item out."""
    name: str = Field(min_length=1, max_length=200)
    number: int = Field(ge=0)
    org: str | None = None


class Lending(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    item_id: uuid.UUID
    item_qr_id: str
    spot_name: str
    lending_at: datetime
    returned_at: datetime | None = None
    borrower_name: str
    borrower_number: int
    borrower_org: str | None = None

    @field_validator("lending_at", "returned_at")
    @classmethod
    def aware_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v) if v is not None else None

    @property
    def state(self) -> LendingState:
        if self.returned_at is None:
            return LendingState.LENT
        return LendingState.AVAILABLE
