"""Lending Ledger — borrow/return state machine over the lendings table.

Invariants:
    - States per item: AVAILABLE (no open row) → LENT (one open row) → AVAILABLE
    - lend() refuses when the item id OR its current QR already has an open row;
      both checks are needed because a reassigned QR could alias another item's lending
    - The partial unique indexes catch concurrent lends at commit time; that
      IntegrityError surfaces as the same AlreadyLentError as the pre-check
    - return_item() sets returned_at exactly once (UPDATE guarded by returned_at IS NULL)
    - Returning with no open row is NotFoundError and writes nothing
    - Business-rule errors are never retried here

Design Decisions:
    - return by QR re-resolves the QR to the item holding it now, never the lend-time snapshot
    - is_lending by QR looks at the lend-time snapshot: the sticker that walked out is still out
    - Item resolution goes through ItemRegistry so lookups share one definition of "current QR"
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import exists, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qr_inventory.core.domain_types import (
    ByItemId, ByLendingId, ByQr, ItemKey, LendingKey,
)
from qr_inventory.core.errors import AlreadyLentError, ErrorContext, NotFoundError
from qr_inventory.infrastructure.database import DatabaseSessionManager
from qr_inventory.models.lending import Lending as LendingRow
from qr_inventory.schemas.lending import Borrower, Lending
from qr_inventory.services.item_registry import ItemRegistry

logger = logging.getLogger(__name__)

_OPEN = LendingRow.returned_at.is_(None)


class LendingLedger:
    """Lend and return items; answers whether something is out."""

    def __init__(self, db: DatabaseSessionManager, registry: ItemRegistry):
        self.db = db
        self.registry = registry

    async def lend(
        self,
        key: ItemKey,
        borrower: Borrower,
        spot_name: str,
        lending_at: datetime | None = None,
    ) -> Lending:
        """AVAILABLE → LENT. Raises AlreadyLentError if the item or its QR is out."""
        item = await self.registry.resolve(key)
        ctx = ErrorContext(item_id=str(item.id), operation="lend")
        row = LendingRow(
            id=uuid.uuid4(),
            item_id=item.id,
            item_qr_id=item.qr_id,
            spot_name=spot_name,
            lending_at=lending_at or datetime.now(timezone.utc),
            returned_at=None,
            borrower_name=borrower.name,
            borrower_number=borrower.number,
            borrower_org=borrower.org,
        )
        async with self.db.session() as session:
            if await _has_open_lending(session, item.id, item.qr_id):
                raise AlreadyLentError(str(item.id), item.qr_id, ctx)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning(
                    "Concurrent lend lost the race at commit",
                    extra={"item_id": str(item.id), "error_code": "ALREADY_LENT"},
                )
                raise AlreadyLentError(str(item.id), item.qr_id, ctx)
            lending = Lending.model_validate(row)
        logger.info(
            "Item lent",
            extra={
                "item_id": str(item.id), "qr_id": item.qr_id,
                "lending_id": str(lending.id),
            },
        )
        return lending

    async def return_item(
        self, key: LendingKey, returned_at: datetime | None = None,
    ) -> Lending:
        """LENT → AVAILABLE. Raises NotFoundError when nothing is open for the key."""
        returned_at = returned_at or datetime.now(timezone.utc)
        match key:
            case ByQr(qr_id=qr_id):
                current = await self.registry.get_by_qr(qr_id)
                condition = LendingRow.item_id == current.id
            case _:
                condition = _key_condition(key)

        async with self.db.session() as session:
            row = (await session.execute(
                select(LendingRow).where(condition, _OPEN),
            )).scalar_one_or_none()
            if row is None:
                raise NotFoundError(
                    "Open lending", _describe(key),
                    ErrorContext(operation="return"),
                )
            result = await session.execute(
                update(LendingRow)
                .where(LendingRow.id == row.id, _OPEN)
                .values(returned_at=returned_at)
                .execution_options(synchronize_session=False),
            )
            if result.rowcount != 1:
                raise NotFoundError(
                    "Open lending", _describe(key),
                    ErrorContext(lending_id=str(row.id), operation="return"),
                )
            await session.commit()
            lending = Lending.model_validate(row).model_copy(
                update={"returned_at": returned_at},
            )
        logger.info(
            "Item returned",
            extra={"item_id": str(lending.item_id), "lending_id": str(lending.id)},
        )
        return lending

    async def is_lending(self, key: LendingKey) -> bool:
        """Whether an open lending exists for the key (QR checked against lend-time snapshot)."""
        async with self.db.session() as session:
            return bool(await session.scalar(
                select(exists().where(_key_condition(key), _OPEN)),
            ))

    async def get(self, key: LendingKey) -> Lending:
        """The open lending for a key."""
        async with self.db.session() as session:
            row = (await session.execute(
                select(LendingRow).where(_key_condition(key), _OPEN),
            )).scalar_one_or_none()
        if row is None:
            raise NotFoundError("Open lending", _describe(key))
        return Lending.model_validate(row)

    async def list_open(self) -> list[Lending]:
        query = select(LendingRow).where(_OPEN).order_by(LendingRow.lending_at)
        async with self.db.session() as session:
            rows = (await session.execute(query)).scalars().all()
        return [Lending.model_validate(r) for r in rows]

    async def history(self, item_id: uuid.UUID) -> list[Lending]:
        """Every lending of an item, newest first."""
        query = (
            select(LendingRow)
            .where(LendingRow.item_id == item_id)
            .order_by(LendingRow.lending_at.desc())
        )
        async with self.db.session() as session:
            rows = (await session.execute(query)).scalars().all()
        return [Lending.model_validate(r) for r in rows]


async def _has_open_lending(
    session: AsyncSession, item_id: uuid.UUID, qr_id: str,
) -> bool:
    """Open row for the item id, or for the QR it carries, in one query."""
    return bool(await session.scalar(
        select(exists().where(
            _OPEN,
            or_(LendingRow.item_id == item_id, LendingRow.item_qr_id == qr_id),
        )),
    ))


def _key_condition(key: LendingKey):
    match key:
        case ByLendingId(lending_id=lending_id):
            return LendingRow.id == lending_id
        case ByItemId(item_id=item_id):
            return LendingRow.item_id == item_id
        case ByQr(qr_id=qr_id):
            return LendingRow.item_qr_id == qr_id
    raise TypeError(f"Unsupported lending key: {key!r}")


def _describe(key: LendingKey) -> str:
    match key:
        case ByLendingId(lending_id=lending_id):
            return f"lending {lending_id}"
        case ByItemId(item_id=item_id):
            return f"item {item_id}"
        case ByQr(qr_id=qr_id):
            return f"QR {qr_id}"
    return repr(key)
