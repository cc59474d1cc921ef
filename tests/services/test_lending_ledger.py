"""Lending Ledger — verifies the borrow/return state machine and its conflict rules.

Invariants:
    - An item has at most one open lending; a second lend is ALREADY_LENT
    - A QR code that walked out with a lending blocks whichever item carries it now
    - Returning when nothing is open is NOT_FOUND and writes nothing
    - A lend that slips past the pre-check still fails at commit (partial unique index)

Design Decisions:
    - The race is simulated by disabling the pre-check, not by real concurrency:
      the in-memory SQLite engine shares one connection
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from qr_inventory.core.domain_types import (
    ByItemId, ByLendingId, ByQr, LendingState,
)
from qr_inventory.core.errors import AlreadyLentError, NotFoundError
from qr_inventory.models.lending import Lending as LendingRow
import qr_inventory.services.lending_ledger as ledger_module


async def _lending_rows(db) -> int:
    async with db.session() as session:
        return await session.scalar(select(func.count()).select_from(LendingRow))


@pytest.fixture
async def table(registry, make_item):
    outcome = await registry.create(make_item(qr_id="Q1", name="Folding table"))
    return outcome.value


# ─── Lend ───────────────────────────────────────────────────────


async def test_lend_records_open_lending(ledger, table, alice):
    lending = await ledger.lend(ByItemId(table.id), alice, "Gym")

    assert lending.item_id == table.id
    assert lending.item_qr_id == "Q1"
    assert lending.spot_name == "Gym"
    assert lending.borrower_name == "Alice"
    assert lending.returned_at is None
    assert lending.state == LendingState.LENT
    assert await ledger.is_lending(ByItemId(table.id))


async def test_lend_by_qr_resolves_current_holder(ledger, table, alice):
    lending = await ledger.lend(ByQr("Q1"), alice, "Gym")
    assert lending.item_id == table.id


async def test_second_lend_is_already_lent(ledger, table, alice, bob):
    await ledger.lend(ByItemId(table.id), alice, "Gym")

    with pytest.raises(AlreadyLentError) as exc_info:
        await ledger.lend(ByItemId(table.id), bob, "Hall")

    assert exc_info.value.code == "ALREADY_LENT"
    assert len(await ledger.list_open()) == 1


async def test_lend_unknown_item_is_not_found(ledger, alice):
    with pytest.raises(NotFoundError):
        await ledger.lend(ByQr("nope"), alice, "Gym")


async def test_commit_time_conflict_maps_to_already_lent(
    ledger, table, alice, bob, db, monkeypatch,
):
    """With the pre-check bypassed, the partial unique index still refuses."""
    await ledger.lend(ByItemId(table.id), alice, "Gym")

    async def _never_open(session, item_id, qr_id):
        return False

    monkeypatch.setattr(ledger_module, "_has_open_lending", _never_open)

    with pytest.raises(AlreadyLentError):
        await ledger.lend(ByItemId(table.id), bob, "Hall")
    assert await _lending_rows(db) == 1


# ─── Return ─────────────────────────────────────────────────────


async def test_lend_return_lend_again(ledger, table, alice, bob):
    first = await ledger.lend(ByItemId(table.id), alice, "Gym")
    returned = await ledger.return_item(ByItemId(table.id))

    assert returned.id == first.id
    assert returned.returned_at is not None
    assert returned.state == LendingState.AVAILABLE
    assert not await ledger.is_lending(ByItemId(table.id))

    second = await ledger.lend(ByItemId(table.id), bob, "Hall")
    assert second.id != first.id
    assert await ledger.is_lending(ByItemId(table.id))


async def test_return_by_lending_id(ledger, table, alice):
    lending = await ledger.lend(ByItemId(table.id), alice, "Gym")
    returned_at = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)

    returned = await ledger.return_item(ByLendingId(lending.id), returned_at)

    assert returned.returned_at == returned_at


async def test_return_without_open_lending_is_not_found(ledger, table, db):
    with pytest.raises(NotFoundError) as exc_info:
        await ledger.return_item(ByItemId(table.id))

    assert exc_info.value.code == "NOT_FOUND"
    assert await _lending_rows(db) == 0


async def test_second_return_is_not_found(ledger, table, alice):
    await ledger.lend(ByItemId(table.id), alice, "Gym")
    await ledger.return_item(ByItemId(table.id))

    with pytest.raises(NotFoundError):
        await ledger.return_item(ByItemId(table.id))


async def test_return_keeps_first_returned_at(ledger, table, alice):
    lending = await ledger.lend(ByItemId(table.id), alice, "Gym")
    first = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    await ledger.return_item(ByItemId(table.id), first)

    with pytest.raises(NotFoundError):
        await ledger.return_item(ByLendingId(lending.id), first + timedelta(hours=1))

    history = await ledger.history(table.id)
    assert history[0].returned_at == first


# ─── QR reassignment ────────────────────────────────────────────


async def test_reassigned_qr_blocks_new_holder(registry, ledger, table, make_item, alice, bob):
    """I1 leaves with Q1, gets re-stickered Q2; I2 takes Q1 and cannot be lent."""
    await ledger.lend(ByItemId(table.id), alice, "Gym")
    await registry.update(table.model_copy(update={"qr_id": "Q2"}))
    chair = (await registry.create(make_item(qr_id="Q1", name="Chair"))).value

    assert await ledger.is_lending(ByQr("Q1"))
    assert await ledger.is_lending(ByItemId(table.id))
    assert not await ledger.is_lending(ByQr("Q2"))
    assert not await ledger.is_lending(ByItemId(chair.id))

    with pytest.raises(AlreadyLentError):
        await ledger.lend(ByItemId(chair.id), bob, "Hall")


async def test_return_by_qr_targets_current_holder(registry, ledger, table, make_item, alice):
    await ledger.lend(ByItemId(table.id), alice, "Gym")
    await registry.update(table.model_copy(update={"qr_id": "Q2"}))
    await registry.create(make_item(qr_id="Q1", name="Chair"))

    # Q1 now belongs to the chair, which has nothing open
    with pytest.raises(NotFoundError):
        await ledger.return_item(ByQr("Q1"))

    returned = await ledger.return_item(ByQr("Q2"))
    assert returned.item_id == table.id
    assert returned.item_qr_id == "Q1"
    assert not await ledger.is_lending(ByQr("Q1"))


# ─── Reads ──────────────────────────────────────────────────────


async def test_get_open_lending(ledger, table, alice):
    lending = await ledger.lend(ByItemId(table.id), alice, "Gym")

    assert (await ledger.get(ByQr("Q1"))).id == lending.id
    assert (await ledger.get(ByLendingId(lending.id))).borrower_number == alice.number


async def test_get_without_open_lending_is_not_found(ledger, table):
    with pytest.raises(NotFoundError):
        await ledger.get(ByItemId(table.id))


async def test_list_open_and_history(registry, ledger, table, make_item, alice, bob):
    chair = (await registry.create(make_item(qr_id="Q9", name="Chair"))).value
    t0 = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)

    await ledger.lend(ByItemId(table.id), alice, "Gym", lending_at=t0)
    await ledger.return_item(ByItemId(table.id), t0 + timedelta(hours=2))
    await ledger.lend(ByItemId(table.id), bob, "Hall", lending_at=t0 + timedelta(days=1))
    await ledger.lend(ByItemId(chair.id), alice, "Gym", lending_at=t0 + timedelta(days=2))

    open_items = [lending.item_id for lending in await ledger.list_open()]
    assert open_items == [table.id, chair.id]

    history = await ledger.history(table.id)
    assert [h.borrower_name for h in history] == ["Bob", "Alice"]
    assert history[1].returned_at == t0 + timedelta(hours=2)


async def test_alice_then_bob_then_return(ledger, table, alice, bob):
    assert (await ledger.lend(ByQr("Q1"), alice, "Gym")).state == LendingState.LENT

    with pytest.raises(AlreadyLentError):
        await ledger.lend(ByQr("Q1"), bob, "Gym")

    t1 = datetime(2026, 5, 2, 17, 0, tzinfo=timezone.utc)
    returned = await ledger.return_item(ByItemId(table.id), t1)

    assert returned.state == LendingState.AVAILABLE
    assert returned.borrower_name == "Alice"
    assert not await ledger.is_lending(ByItemId(table.id))
