"""Location Registry — CRUD for containers and spots.

Invariants:
    - Spot names are unique (primary key); container QR ids are unique
    - update() replaces every field; a missing row is NotFoundError, never an insert
    - Nothing here is mirrored into the search index
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from qr_inventory.core.errors import AlreadyExistsError, NotFoundError
from qr_inventory.infrastructure.database import DatabaseSessionManager
from qr_inventory.models.container import Container as ContainerRow
from qr_inventory.models.spot import Spot as SpotRow
from qr_inventory.schemas.item import Container, Spot

logger = logging.getLogger(__name__)


class LocationRegistry:
    """Containers (QR-tagged cases) and spots (named places)."""

    def __init__(self, db: DatabaseSessionManager):
        self.db = db

    # ─── Containers ─────────────────────────────────────────────

    async def create_container(self, container: Container) -> Container:
        async with self.db.session() as session:
            if await session.get(ContainerRow, container.id) is not None:
                raise AlreadyExistsError("Container", str(container.id))
            session.add(ContainerRow(**container.model_dump()))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise AlreadyExistsError("Container with QR", container.qr_id)
        logger.info("Container created", extra={"qr_id": container.qr_id})
        return container

    async def update_container(self, container: Container) -> Container:
        async with self.db.session() as session:
            row = await session.get(ContainerRow, container.id)
            if row is None:
                raise NotFoundError("Container", str(container.id))
            for column, value in container.model_dump(exclude={"id", "created_at"}).items():
                setattr(row, column, value)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise AlreadyExistsError("Container with QR", container.qr_id)
            return Container.model_validate(row)

    async def delete_container(self, container_id: uuid.UUID) -> None:
        async with self.db.session() as session:
            row = await session.get(ContainerRow, container_id)
            if row is None:
                raise NotFoundError("Container", str(container_id))
            await session.delete(row)
            await session.commit()
        logger.info("Container deleted", extra={"item_id": str(container_id)})

    async def get_container(self, container_id: uuid.UUID) -> Container:
        async with self.db.session() as session:
            row = await session.get(ContainerRow, container_id)
        if row is None:
            raise NotFoundError("Container", str(container_id))
        return Container.model_validate(row)

    async def list_containers(self) -> list[Container]:
        async with self.db.session() as session:
            rows = (await session.execute(
                select(ContainerRow).order_by(ContainerRow.created_at),
            )).scalars().all()
        return [Container.model_validate(r) for r in rows]

    # ─── Spots ──────────────────────────────────────────────────

    async def create_spot(self, spot: Spot) -> Spot:
        async with self.db.session() as session:
            if await session.get(SpotRow, spot.name) is not None:
                raise AlreadyExistsError("Spot", spot.name)
            session.add(SpotRow(**spot.model_dump()))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise AlreadyExistsError("Spot", spot.name)
        logger.info(f"Spot '{spot.name}' created")
        return spot

    async def update_spot(self, spot: Spot) -> Spot:
        async with self.db.session() as session:
            row = await session.get(SpotRow, spot.name)
            if row is None:
                raise NotFoundError("Spot", spot.name)
            for column, value in spot.model_dump(exclude={"name"}).items():
                setattr(row, column, value)
            await session.commit()
            return Spot.model_validate(row)

    async def delete_spot(self, name: str) -> None:
        async with self.db.session() as session:
            row = await session.get(SpotRow, name)
            if row is None:
                raise NotFoundError("Spot", name)
            await session.delete(row)
            await session.commit()
        logger.info(f"Spot '{name}' deleted")

    async def get_spot(self, name: str) -> Spot:
        async with self.db.session() as session:
            row = await session.get(SpotRow, name)
        if row is None:
            raise NotFoundError("Spot", name)
        return Spot.model_validate(row)

    async def list_spots(self) -> list[Spot]:
        async with self.db.session() as session:
            rows = (await session.execute(
                select(SpotRow).order_by(SpotRow.name),
            )).scalars().all()
        return [Spot.model_validate(r) for r in rows]
