"""Operation Guard — role checks in front of every mutating operation.

Invariants:
    - Every mutation authorizes the bearer token before touching any store
    - Deletes require DESTRUCTIVE_ROLES (Administrator); other mutations MUTATION_ROLES
    - Every operation → required role set mapping is visible in REQUIRED_ROLES
    - A failed check raises UnauthorizedError and the wrapped service is never called

Design Decisions:
    - Explicit methods over __getattr__ forwarding: each guarded call is greppable
"""

import uuid
from datetime import datetime

from qr_inventory.core.credential_rules import DESTRUCTIVE_ROLES, MUTATION_ROLES
from qr_inventory.core.domain_types import ItemKey, LendingKey, Role
from qr_inventory.schemas.item import Container, Item, Spot
from qr_inventory.schemas.lending import Borrower, Lending
from qr_inventory.schemas.outcome import WriteOutcome
from qr_inventory.services.credentials import CredentialService
from qr_inventory.services.item_registry import ItemRegistry
from qr_inventory.services.lending_ledger import LendingLedger
from qr_inventory.services.location_registry import LocationRegistry

REQUIRED_ROLES: dict[str, frozenset[Role]] = {
    "create_item": MUTATION_ROLES,
    "update_item": MUTATION_ROLES,
    "delete_item": DESTRUCTIVE_ROLES,
    "resync_items": MUTATION_ROLES,
    "create_container": MUTATION_ROLES,
    "update_container": MUTATION_ROLES,
    "delete_container": DESTRUCTIVE_ROLES,
    "create_spot": MUTATION_ROLES,
    "update_spot": MUTATION_ROLES,
    "delete_spot": DESTRUCTIVE_ROLES,
    "lend": MUTATION_ROLES,
    "return_item": MUTATION_ROLES,
}


class GuardedInventory:
    """Token-checked entry points for the transport layer."""

    def __init__(
        self,
        credentials: CredentialService,
        items: ItemRegistry,
        locations: LocationRegistry,
        ledger: LendingLedger,
    ):
        self.credentials = credentials
        self.items = items
        self.locations = locations
        self.ledger = ledger

    async def _require(self, token: str | None, operation: str) -> None:
        await self.credentials.authorize(token, REQUIRED_ROLES[operation])

    # ─── Items ──────────────────────────────────────────────────

    async def create_item(self, token: str | None, item: Item) -> WriteOutcome[Item]:
        await self._require(token, "create_item")
        return await self.items.create(item)

    async def update_item(self, token: str | None, item: Item) -> WriteOutcome[Item]:
        await self._require(token, "update_item")
        return await self.items.update(item)

    async def delete_item(
        self, token: str | None, item_id: uuid.UUID,
    ) -> WriteOutcome[uuid.UUID]:
        await self._require(token, "delete_item")
        return await self.items.delete(item_id)

    async def resync_items(
        self, token: str | None, item_ids: list[uuid.UUID] | None = None,
    ) -> WriteOutcome[list[Item]]:
        await self._require(token, "resync_items")
        return await self.items.resync(item_ids)

    # ─── Containers & Spots ─────────────────────────────────────

    async def create_container(self, token: str | None, container: Container) -> Container:
        await self._require(token, "create_container")
        return await self.locations.create_container(container)

    async def update_container(self, token: str | None, container: Container) -> Container:
        await self._require(token, "update_container")
        return await self.locations.update_container(container)

    async def delete_container(self, token: str | None, container_id: uuid.UUID) -> None:
        await self._require(token, "delete_container")
        await self.locations.delete_container(container_id)

    async def create_spot(self, token: str | None, spot: Spot) -> Spot:
        await self._require(token, "create_spot")
        return await self.locations.create_spot(spot)

    async def update_spot(self, token: str | None, spot: Spot) -> Spot:
        await self._require(token, "update_spot")
        return await self.locations.update_spot(spot)

    async def delete_spot(self, token: str | None, name: str) -> None:
        await self._require(token, "delete_spot")
        await self.locations.delete_spot(name)

    # ─── Lending ────────────────────────────────────────────────

    async def lend(
        self,
        token: str | None,
        key: ItemKey,
        borrower: Borrower,
        spot_name: str,
        lending_at: datetime | None = None,
    ) -> Lending:
        await self._require(token, "lend")
        return await self.ledger.lend(key, borrower, spot_name, lending_at)

    async def return_item(
        self,
        token: str | None,
        key: LendingKey,
        returned_at: datetime | None = None,
    ) -> Lending:
        await self._require(token, "return_item")
        return await self.ledger.return_item(key, returned_at)
