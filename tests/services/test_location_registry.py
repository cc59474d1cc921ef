"""Location Registry — verifies container and spot CRUD."""

import uuid

import pytest

from qr_inventory.core.domain_types import Area, QrColor, Storage
from qr_inventory.core.errors import AlreadyExistsError, NotFoundError
from qr_inventory.schemas.item import Container, Spot


def _container(qr_id: str = "C1") -> Container:
    return Container(qr_id=qr_id, qr_color=QrColor.BLUE, storage=Storage.ROOM102)


async def test_container_round_trip(locations):
    container = await locations.create_container(_container())

    stored = await locations.get_container(container.id)

    assert stored == container
    assert [c.id for c in await locations.list_containers()] == [container.id]


async def test_container_duplicate_qr_is_already_exists(locations):
    await locations.create_container(_container("C1"))
    with pytest.raises(AlreadyExistsError):
        await locations.create_container(_container("C1"))


async def test_container_update_and_delete(locations):
    container = await locations.create_container(_container())

    updated = await locations.update_container(
        container.model_copy(update={"description": "Cable box"}),
    )
    assert updated.description == "Cable box"
    assert updated.created_at == container.created_at

    await locations.delete_container(container.id)
    with pytest.raises(NotFoundError):
        await locations.get_container(container.id)


async def test_missing_container_is_not_found(locations):
    with pytest.raises(NotFoundError):
        await locations.delete_container(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await locations.update_container(_container())


async def test_spot_crud(locations):
    gym = Spot(name="Gym", area=Area.AREA2, building="B", floor=1)
    await locations.create_spot(gym)

    with pytest.raises(AlreadyExistsError):
        await locations.create_spot(gym)

    await locations.update_spot(gym.model_copy(update={"room": "G-101"}))
    assert (await locations.get_spot("Gym")).room == "G-101"

    await locations.create_spot(Spot(name="Atrium", area=Area.AREA1))
    assert [s.name for s in await locations.list_spots()] == ["Atrium", "Gym"]

    await locations.delete_spot("Gym")
    with pytest.raises(NotFoundError):
        await locations.get_spot("Gym")


async def test_spot_floor_cannot_be_negative():
    with pytest.raises(ValueError):
        Spot(name="Basement", area=Area.AREA1, floor=-1)


async def test_update_spot_returns_stored_row(locations):
    await locations.create_spot(Spot(name="Hall", area=Area.AREA4, floor=2))

    updated = await locations.update_spot(
        Spot(name="Hall", area=Area.AREA5, building="Main", floor=0),
    )

    assert updated == await locations.get_spot("Hall")
    assert updated.area == "area5"
    assert updated.floor == 0
    assert updated.room is None
