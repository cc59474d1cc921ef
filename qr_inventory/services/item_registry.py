"""Item Registry — identity and CRUD for items, mirrored into the search index.

Invariants:
    - Registry commit happens first, index write second (two-phase, non-transactional)
    - Registry failure raises and the index is never touched
    - Index failure after a commit never rolls the commit back: the write is
      reported as WriteOutcome(index_synced=False) and logged as INDEX_OUT_OF_SYNC
    - update() is a full replacement; created_at is preserved from the stored row
    - Duplicate id or QR on create/update → AlreadyExistsError

Design Decisions:
    - get_by_qr resolves to the item holding the QR *now*; QR codes are reassignable
    - list_items() takes one ItemFilter at a time; no free-form query building
"""

import logging
import uuid
from typing import Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qr_inventory.core.domain_types import ByItemId, ByQr, ItemFilter, ItemFilterField, ItemKey
from qr_inventory.core.errors import (
    AlreadyExistsError, NotFoundError, ParseError, SearchIndexError,
)
from qr_inventory.infrastructure.database import DatabaseSessionManager
from qr_inventory.models.item import Item as ItemRow
from qr_inventory.schemas.item import Item
from qr_inventory.schemas.outcome import WriteOutcome
from qr_inventory.services.search_projector import SearchProjector

logger = logging.getLogger(__name__)


class ItemRegistry:
    """Authoritative store of items; every write is projected into search."""

    def __init__(self, db: DatabaseSessionManager, projector: SearchProjector):
        self.db = db
        self.projector = projector

    # ─── Reads ──────────────────────────────────────────────────

    async def get_by_id(self, item_id: uuid.UUID) -> Item:
        async with self.db.session() as session:
            row = await session.get(ItemRow, item_id)
        if row is None:
            raise NotFoundError("Item", str(item_id))
        return Item.model_validate(row)

    async def get_by_qr(self, qr_id: str) -> Item:
        async with self.db.session() as session:
            row = await _row_by_qr(session, qr_id)
        if row is None:
            raise NotFoundError("Item with QR", qr_id)
        return Item.model_validate(row)

    async def resolve(self, key: ItemKey) -> Item:
        """Look an item up by id or by the QR code it currently carries."""
        match key:
            case ByItemId(item_id=item_id):
                return await self.get_by_id(item_id)
            case ByQr(qr_id=qr_id):
                return await self.get_by_qr(qr_id)
        raise TypeError(f"Unsupported item key: {key!r}")

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[Item]:
        query = select(ItemRow).order_by(ItemRow.created_at, ItemRow.id)
        if item_filter is not None:
            query = query.where(_filter_clause(item_filter))
        async with self.db.session() as session:
            rows = (await session.execute(query)).scalars().all()
        return [Item.model_validate(r) for r in rows]

    # ─── Writes ─────────────────────────────────────────────────

    async def create(self, item: Item) -> WriteOutcome[Item]:
        async with self.db.session() as session:
            if await session.get(ItemRow, item.id) is not None:
                raise AlreadyExistsError("Item", str(item.id))
            if await _row_by_qr(session, item.qr_id) is not None:
                raise AlreadyExistsError("Item with QR", item.qr_id)
            session.add(ItemRow(**item.model_dump()))
            await _commit_unique(session, "Item", item.qr_id)
        logger.info(
            "Item created", extra={"item_id": str(item.id), "qr_id": item.qr_id},
        )
        return await self._project_upsert(item)

    async def update(self, item: Item) -> WriteOutcome[Item]:
        """Replace every field of an existing item (QR reassignment included)."""
        async with self.db.session() as session:
            row = await session.get(ItemRow, item.id)
            if row is None:
                raise NotFoundError("Item", str(item.id))
            holder = await _row_by_qr(session, item.qr_id)
            if holder is not None and holder.id != item.id:
                raise AlreadyExistsError("Item with QR", item.qr_id)
            stored = item.model_copy(update={"created_at": row.created_at})
            for column, value in stored.model_dump(exclude={"id"}).items():
                setattr(row, column, value)
            await _commit_unique(session, "Item", item.qr_id)
            updated = Item.model_validate(row)
        logger.info(
            "Item updated", extra={"item_id": str(item.id), "qr_id": item.qr_id},
        )
        return await self._project_upsert(updated)

    async def delete(self, item_id: uuid.UUID) -> WriteOutcome[uuid.UUID]:
        async with self.db.session() as session:
            row = await session.get(ItemRow, item_id)
            if row is None:
                raise NotFoundError("Item", str(item_id))
            await session.delete(row)
            await session.commit()
        logger.info("Item deleted", extra={"item_id": str(item_id)})
        try:
            await self.projector.delete([item_id])
        except SearchIndexError as e:
            self._log_out_of_sync(e, item_id)
            return WriteOutcome(item_id, index_synced=False, index_error=e)
        return WriteOutcome(item_id)

    async def resync(
        self, item_ids: Sequence[uuid.UUID] | None = None,
    ) -> WriteOutcome[list[Item]]:
        """Re-upsert items into the index (all of them when item_ids is None)."""
        if item_ids is None:
            items = await self.list_items()
        else:
            items = [await self.get_by_id(i) for i in item_ids]
        try:
            await self.projector.upsert(items)
        except SearchIndexError as e:
            logger.error(
                f"Resync of {len(items)} item(s) failed: {e.message}",
                extra={"error_code": e.code, "operation": "resync"},
            )
            return WriteOutcome(items, index_synced=False, index_error=e)
        return WriteOutcome(items)

    async def _project_upsert(self, item: Item) -> WriteOutcome[Item]:
        try:
            await self.projector.upsert([item])
        except SearchIndexError as e:
            self._log_out_of_sync(e, item.id)
            return WriteOutcome(item, index_synced=False, index_error=e)
        return WriteOutcome(item)

    def _log_out_of_sync(self, error: SearchIndexError, item_id: uuid.UUID) -> None:
        error.context.item_id = str(item_id)
        logger.warning(
            f"Registry write committed but index is out of sync: {error.message}",
            extra={
                "item_id": str(item_id),
                "error_code": error.code,
                "operation": error.operation,
            },
        )


async def _row_by_qr(session: AsyncSession, qr_id: str) -> ItemRow | None:
    result = await session.execute(select(ItemRow).where(ItemRow.qr_id == qr_id))
    return result.scalar_one_or_none()


async def _commit_unique(session: AsyncSession, resource: str, key: str) -> None:
    """Commit, turning a lost uniqueness race into AlreadyExistsError."""
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AlreadyExistsError(resource, key)


def _filter_clause(item_filter: ItemFilter):
    value = item_filter.value
    match item_filter.field:
        case ItemFilterField.ID:
            return ItemRow.id == _parse_uuid(value)
        case ItemFilterField.QR_ID:
            return ItemRow.qr_id == value
        case ItemFilterField.NAME:
            return ItemRow.name == value
        case ItemFilterField.DESCRIPTION:
            return func.lower(ItemRow.description).contains(value.lower(), autoescape=True)
        case ItemFilterField.STORAGE:
            return ItemRow.storage == value
        case ItemFilterField.PARENT_ID:
            return ItemRow.parent_id == value
    raise ValueError(f"Unsupported filter field: {item_filter.field}")


def _parse_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ParseError("item id", value) from None
