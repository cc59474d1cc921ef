"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ItemId, ContainerId, LendingId wrap UUIDs; QrId wraps the printed QR string
    - All valid states encoded as Enums — no raw string matching
    - Role.parse is the only way a free-form string becomes a Role; unknown input raises ParseError
    - Lookup keys (ByItemId, ByQr, ByLendingId) are frozen: usable as dict keys and in match statements

Design Decisions:
    - str Enums: values are stored as text columns and serialized as-is to the search index
    - A QR id is NOT an identity: it can be reassigned, so it gets its own key type
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID

from qr_inventory.core.errors import ParseError


# ─── Identity Types ──────────────────────────────────────────────

ItemId = NewType("ItemId", UUID)
ContainerId = NewType("ContainerId", UUID)
LendingId = NewType("LendingId", UUID)
QrId = NewType("QrId", str)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Permission level bound to a credential."""
    ADMINISTRATOR = "administrator"
    EQUIPMENT_MANAGER = "equipment_manager"
    GENERAL = "general"

    @classmethod
    def parse(cls, raw: str) -> "Role":
        """Convert a role name into a Role, raising ParseError on unknown input."""
        try:
            return cls(raw.strip().lower())
        except (ValueError, AttributeError):
            raise ParseError("role", raw) from None


class QrColor(str, Enum):
    """Color of the sticker the QR code is printed on."""
    RED = "red"
    ORANGE = "orange"
    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    PINK = "pink"


class Storage(str, Enum):
    """Room an item or container is kept in."""
    ROOM101 = "room101"
    ROOM102 = "room102"
    ROOM206 = "room206"


class Area(str, Enum):
    """Campus area a spot belongs to."""
    AREA1 = "area1"
    AREA2 = "area2"
    AREA3 = "area3"
    AREA4 = "area4"
    AREA5 = "area5"


class LendingState(str, Enum):
    AVAILABLE = "available"
    LENT = "lent"


class ItemFilterField(str, Enum):
    """Columns an item listing may be filtered on (one at a time)."""
    ID = "id"
    QR_ID = "qr_id"
    NAME = "name"
    DESCRIPTION = "description"
    STORAGE = "storage"
    PARENT_ID = "parent_id"


# ─── Lookup Keys ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ByItemId:
    item_id: UUID


@dataclass(frozen=True)
class ByQr:
    qr_id: str


@dataclass(frozen=True)
class ByLendingId:
    lending_id: UUID


ItemKey = ByItemId | ByQr
LendingKey = ByLendingId | ByItemId | ByQr


@dataclass(frozen=True)
class ItemFilter:
    """Single-field predicate for listing items.

    DESCRIPTION matches case-insensitively as a substring; every other
    field is an exact match.
    """
    field: ItemFilterField
    value: str


# ─── Configuration Values ────────────────────────────────────────

@dataclass(frozen=True)
class RoleCredentialConfig:
    """Externally supplied secret and credential lifetime for one role."""
    secret: str
    ttl_days: int
