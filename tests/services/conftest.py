"""Service test fixtures — async in-memory registry + fake search index.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the full schema
      (partial unique indexes included, via sqlite_where)
    - Services are wired exactly as bootstrap.assemble_core wires them
    - search_store.fail_on lets a test break one index operation at a time

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the lending indexes are
      declared for both dialects so the race guard is exercised here too
"""

import uuid
from datetime import datetime, timezone

import pytest

from qr_inventory.config import Settings
from qr_inventory.bootstrap import assemble_core
from qr_inventory.core.domain_types import QrColor, Role, RoleCredentialConfig, Storage
from qr_inventory.schemas.item import Item
from qr_inventory.schemas.lending import Borrower
from qr_inventory.services.credentials import CredentialService
from tests.services.fake_search_store import InMemorySearchStore

ADMIN_SECRET = "admin-secret"
MANAGER_SECRET = "manager-secret"
GENERAL_SECRET = "general-secret"


@pytest.fixture
def search_store():
    return InMemorySearchStore()


@pytest.fixture
def settings():
    return Settings(
        administrator_pass_key=ADMIN_SECRET,
        administrator_limit_days=7,
        equipment_manager_pass_key=MANAGER_SECRET,
        equipment_manager_limit_days=3,
        general_pass_key=GENERAL_SECRET,
        general_limit_days=1,
        store_timeout_seconds=1.0,
    )


@pytest.fixture
def core(db, search_store, settings):
    return assemble_core(db, search_store, settings)


@pytest.fixture
def registry(core):
    return core.items


@pytest.fixture
def ledger(core):
    return core.ledger


@pytest.fixture
def locations(core):
    return core.locations


@pytest.fixture
def projector(core):
    return core.projector


class FrozenClock:
    """Callable clock a test can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 4, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def credentials(db, clock):
    return CredentialService(
        db,
        {
            Role.ADMINISTRATOR: RoleCredentialConfig(ADMIN_SECRET, 7),
            Role.EQUIPMENT_MANAGER: RoleCredentialConfig(MANAGER_SECRET, 3),
        },
        clock=clock,
    )


@pytest.fixture
def make_item():
    """Factory for Item values; every call gets a fresh id."""
    def _make(qr_id: str = "Q1", name: str = "Folding table", **fields) -> Item:
        defaults = {
            "id": uuid.uuid4(),
            "qr_id": qr_id,
            "qr_color": QrColor.RED,
            "name": name,
            "storage": Storage.ROOM101,
        }
        defaults.update(fields)
        return Item(**defaults)
    return _make


@pytest.fixture
def alice():
    return Borrower(name="Alice", number=202200001, org="jsys")


@pytest.fixture
def bob():
    return Borrower(name="Bob", number=202200002)
