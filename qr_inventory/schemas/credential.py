"""Credential Schema — an issued bearer token and its fixed lifetime."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from qr_inventory.core import credential_rules
from qr_inventory.core.domain_types import Role
from qr_inventory.schemas.item import ensure_aware


class Credential(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    role: Role
    created_at: datetime
    limit_days: int

    @field_validator("created_at")
    @classmethod
    def aware_created_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @property
    def expires_at(self) -> datetime:
        return credential_rules.expires_at(self.created_at, self.limit_days)
