"""Bootstrap — wires store handles and services into one InventoryCore.

Invariants:
    - Exactly one DatabaseSessionManager and one search client per core
    - Handles are passed into constructors; nothing is stored in module globals
    - aclose() releases the pool and the search client

Design Decisions:
    - The surrounding service owns the lifecycle (call build_core on startup,
      aclose on shutdown)
"""

import logging
from dataclasses import dataclass

from qr_inventory.config import Settings
from qr_inventory.core.repository_protocols import SearchStore
from qr_inventory.infrastructure.database import DatabaseSessionManager
from qr_inventory.infrastructure.observability import setup_logging
from qr_inventory.infrastructure.search_index import MeilisearchItemIndex
from qr_inventory.services.credentials import CredentialService
from qr_inventory.services.item_registry import ItemRegistry
from qr_inventory.services.lending_ledger import LendingLedger
from qr_inventory.services.location_registry import LocationRegistry
from qr_inventory.services.operation_guard import GuardedInventory
from qr_inventory.services.search_projector import SearchProjector

logger = logging.getLogger(__name__)


@dataclass
class InventoryCore:
    db: DatabaseSessionManager
    search_store: SearchStore
    projector: SearchProjector
    items: ItemRegistry
    locations: LocationRegistry
    ledger: LendingLedger
    credentials: CredentialService
    guarded: GuardedInventory

    async def aclose(self) -> None:
        await self.db.dispose()
        close = getattr(self.search_store, "aclose", None)
        if close is not None:
            await close()
        logger.info("Inventory core closed")


def assemble_core(
    db: DatabaseSessionManager,
    search_store: SearchStore,
    settings: Settings,
) -> InventoryCore:
    """Build every service on top of existing handles."""
    projector = SearchProjector(search_store, timeout=settings.store_timeout_seconds)
    items = ItemRegistry(db, projector)
    locations = LocationRegistry(db)
    ledger = LendingLedger(db, items)
    credentials = CredentialService(db, settings.role_credentials())
    guarded = GuardedInventory(credentials, items, locations, ledger)
    return InventoryCore(
        db=db,
        search_store=search_store,
        projector=projector,
        items=items,
        locations=locations,
        ledger=ledger,
        credentials=credentials,
        guarded=guarded,
    )


def build_core(settings: Settings) -> InventoryCore:
    """Open the registry pool and search client described by settings."""
    setup_logging(settings)
    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        timeout=settings.store_timeout_seconds,
    )
    search_store = MeilisearchItemIndex.connect(
        settings.meilisearch_url,
        settings.meilisearch_api_key,
        index_name=settings.search_index_name,
        timeout_seconds=settings.store_timeout_seconds,
    )
    core = assemble_core(db, search_store, settings)
    configured = sorted(r.value for r in core.credentials.role_config)
    logger.info(f"Inventory core ready; credential roles: {configured}")
    return core
