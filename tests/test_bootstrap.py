"""Bootstrap — verifies wiring and shutdown of the inventory core."""

from unittest.mock import AsyncMock

from qr_inventory.bootstrap import assemble_core
from qr_inventory.config import Settings
from qr_inventory.core.domain_types import Role
from tests.services.fake_search_store import InMemorySearchStore


async def test_services_share_handles(db):
    store = InMemorySearchStore()
    core = assemble_core(db, store, Settings(general_pass_key="g", general_limit_days=1))

    assert core.items.db is db
    assert core.ledger.registry is core.items
    assert core.projector.store is store
    assert core.guarded.credentials is core.credentials
    assert Role.GENERAL in core.credentials.role_config


async def test_aclose_closes_search_client(db):
    store = InMemorySearchStore()
    store.aclose = AsyncMock()
    core = assemble_core(db, store, Settings())

    await core.aclose()

    store.aclose.assert_awaited_once()
