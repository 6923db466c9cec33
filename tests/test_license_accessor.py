"""
Tests for licenses and their seats.
"""
import pytest

from orgdesk.accessors import MutationError, MutationFailureReason
from orgdesk.models import ModelValidationError


async def create_people(workspace, *names):
    return [
        await workspace.people.create(f"{name.lower()}@x.co", name, 'Dev')
        for name in names
    ]


@pytest.mark.asyncio
async def test_license_creates_its_seats(workspace, start):
    await start()

    figma = await workspace.licenses.create('Figma', 3, 'Design tool')

    seats = workspace.seats.for_license(figma.entity_id)
    assert [s.code for s in seats] == ['Figma-001', 'Figma-002', 'Figma-003']
    assert len({s.entity_id for s in seats}) == 3
    assert len(workspace.seats.available_seats) == 3
    assert [lic.name for lic in workspace.licenses.licenses] == ['Figma']


@pytest.mark.asyncio
async def test_license_validation_happens_before_any_write(workspace, adapter, start):
    await start()
    calls = len(adapter.calls)

    with pytest.raises(ModelValidationError):
        await workspace.licenses.create('Figma', 0)
    with pytest.raises(ModelValidationError):
        await workspace.licenses.create('', 2)

    assert len(adapter.calls) == calls


@pytest.mark.asyncio
async def test_duplicate_license_name(workspace, start):
    await start()
    await workspace.licenses.create('Figma', 2)

    with pytest.raises(MutationError) as excinfo:
        await workspace.licenses.create('Figma', 5)

    assert excinfo.value.is_conflict
    assert len(workspace.seats.items) == 2


@pytest.mark.asyncio
async def test_failed_seat_creation_removes_the_license(workspace, adapter, start):
    await start()
    adapter.fail_next('seats', 'insert_many')

    with pytest.raises(MutationError) as excinfo:
        await workspace.licenses.create('Figma', 3)

    assert excinfo.value.reason == MutationFailureReason.partial
    assert excinfo.value.orphan_id is None
    assert await adapter.select('licenses') == []
    assert workspace.licenses.items == []
    assert workspace.seats.items == []


@pytest.mark.asyncio
async def test_uncompensated_license_is_reported(workspace, adapter, start):
    await start()
    adapter.fail_next('seats', 'insert_many')
    adapter.fail_next('licenses', 'delete')

    with pytest.raises(MutationError) as excinfo:
        await workspace.licenses.create('Figma', 3)

    orphans = await adapter.select('licenses')
    assert excinfo.value.reason == MutationFailureReason.partial
    assert excinfo.value.orphan_id == orphans[0]['id']
    assert [lic.entity_id for lic in workspace.licenses.items] == [orphans[0]['id']]


@pytest.mark.asyncio
async def test_assign_and_unassign_seat(workspace, start):
    await start()
    ana, = await create_people(workspace, 'Ana')
    figma = await workspace.licenses.create('Figma', 2)
    seat = workspace.seats.for_license(figma.entity_id)[0]

    assigned = await workspace.seats.assign(seat.entity_id, ana.entity_id)

    assert assigned.person_id == ana.entity_id
    assert assigned.assigned_at is not None
    assert assigned.code == 'Figma-001'
    assert workspace.seats.for_person(ana.entity_id) == [assigned]
    assert len(workspace.seats.available_seats) == 1

    released = await workspace.seats.unassign(seat.entity_id)

    assert (released.person_id, released.assigned_at) == (None, None)
    assert len(workspace.seats.available_seats) == 2


@pytest.mark.asyncio
async def test_assign_can_relabel_seat(workspace, start):
    await start()
    ana, bea = await create_people(workspace, 'Ana', 'Bea')
    figma = await workspace.licenses.create('Figma', 2)
    first, second = workspace.seats.for_license(figma.entity_id)

    relabelled = await workspace.seats.assign(first.entity_id, ana.entity_id, code='Design-A')
    cleared = await workspace.seats.assign(second.entity_id, bea.entity_id, code='')

    assert relabelled.code == 'Design-A'
    assert cleared.code is None


@pytest.mark.asyncio
async def test_one_seat_per_license_per_person(workspace, adapter, start):
    await start()
    ana, bea = await create_people(workspace, 'Ana', 'Bea')
    figma = await workspace.licenses.create('Figma', 2)
    zoom = await workspace.licenses.create('Zoom', 1)
    first, second = workspace.seats.for_license(figma.entity_id)
    await workspace.seats.assign(first.entity_id, ana.entity_id)
    calls = len(adapter.calls)

    with pytest.raises(ModelValidationError):
        await workspace.seats.assign(second.entity_id, ana.entity_id)
    assert len(adapter.calls) == calls

    # the same person may hold a seat of another license
    await workspace.seats.assign(workspace.seats.for_license(zoom.entity_id)[0].entity_id, ana.entity_id)

    people = workspace.people.items
    assert [p.name for p in workspace.seats.available_people(second.entity_id, people)] == ['Bea']
    assert {p.name for p in workspace.seats.available_people(first.entity_id, people)} == {'Ana', 'Bea'}


@pytest.mark.asyncio
async def test_assign_requires_a_person(workspace, start):
    await start()
    figma = await workspace.licenses.create('Figma', 1)

    with pytest.raises(ModelValidationError):
        await workspace.seats.assign(workspace.seats.items[0].entity_id, None)
    assert workspace.seats.for_license(figma.entity_id)[0].person_id is None


@pytest.mark.asyncio
async def test_deleting_person_releases_their_seats_and_assets(workspace, start):
    await start()
    ana, = await create_people(workspace, 'Ana')
    figma = await workspace.licenses.create('Figma', 1)
    seat = workspace.seats.for_license(figma.entity_id)[0]
    await workspace.seats.assign(seat.entity_id, ana.entity_id)
    laptop = await workspace.assets.create('Laptop', 'Acme', 1200, person_id=ana.entity_id)

    await workspace.people.delete(ana.entity_id)

    seat = workspace.seats.find(seat.entity_id)
    laptop = workspace.assets.find(laptop.entity_id)
    assert workspace.people.items == []
    assert (seat.person_id, seat.assigned_at) == (None, None)
    assert (laptop.person_id, laptop.assigned_at) == (None, None)


@pytest.mark.asyncio
async def test_resizing_a_license(workspace, start):
    await start()
    ana, = await create_people(workspace, 'Ana')
    figma = await workspace.licenses.create('Figma', 3)
    seats = workspace.seats.for_license(figma.entity_id)
    await workspace.seats.assign(seats[2].entity_id, ana.entity_id)

    await workspace.licenses.update(figma.entity_id, total_seats=2)
    assert [s.code for s in workspace.seats.for_license(figma.entity_id)] == ['Figma-001', 'Figma-003']

    await workspace.licenses.update(figma.entity_id, total_seats=4)
    codes = [s.code for s in workspace.seats.for_license(figma.entity_id)]
    assert codes == ['Figma-001', 'Figma-003', 'Figma-002', 'Figma-004']
    assert workspace.licenses.find(figma.entity_id).total_seats == 4


@pytest.mark.asyncio
async def test_cannot_shrink_below_assigned_seats(workspace, adapter, start):
    await start()
    ana, bea = await create_people(workspace, 'Ana', 'Bea')
    figma = await workspace.licenses.create('Figma', 2)
    for seat, person in zip(workspace.seats.for_license(figma.entity_id), [ana, bea]):
        await workspace.seats.assign(seat.entity_id, person.entity_id)

    with pytest.raises(ModelValidationError):
        await workspace.licenses.update(figma.entity_id, total_seats=1)

    assert (await adapter.get_one('licenses', {'id': figma.entity_id}))['total_seats'] == 2
    assert len(workspace.seats.for_license(figma.entity_id)) == 2


@pytest.mark.asyncio
async def test_failed_resize_restores_every_changed_field(workspace, adapter, start):
    await start()
    figma = await workspace.licenses.create('Figma', 2, 'Design tool')
    adapter.fail_next('seats', 'insert_many')

    with pytest.raises(MutationError) as excinfo:
        await workspace.licenses.update(figma.entity_id, name='Sketch', description='', total_seats=4)

    assert excinfo.value.reason == MutationFailureReason.partial
    assert excinfo.value.orphan_id is None
    stored = await workspace.licenses.repository.get_by_id(figma.entity_id)
    assert (stored.name, stored.description, stored.total_seats) == ('Figma', 'Design tool', 2)
    assert workspace.licenses.find(figma.entity_id).name == 'Figma'
    assert [s.code for s in workspace.seats.for_license(figma.entity_id)] == ['Figma-001', 'Figma-002']


@pytest.mark.asyncio
async def test_failed_resize_restores_seat_count(workspace, adapter, start):
    await start()
    figma = await workspace.licenses.create('Figma', 2)
    adapter.fail_next('seats', 'insert_many')

    with pytest.raises(MutationError) as excinfo:
        await workspace.licenses.update(figma.entity_id, total_seats=5)

    assert excinfo.value.reason == MutationFailureReason.partial
    assert workspace.licenses.find(figma.entity_id).total_seats == 2
    assert len(workspace.seats.for_license(figma.entity_id)) == 2


@pytest.mark.asyncio
async def test_rename_without_resize(workspace, adapter, start):
    await start()
    figma = await workspace.licenses.create('Figma', 2)

    renamed = await workspace.licenses.update(figma.entity_id, description='Design')

    assert renamed.description == 'Design'
    assert ('seats', 'insert_many') not in adapter.calls[-4:]


@pytest.mark.asyncio
async def test_deleting_license_removes_its_seats(workspace, start):
    await start()
    figma = await workspace.licenses.create('Figma', 2)
    await workspace.licenses.create('Zoom', 1)

    await workspace.licenses.delete(figma.entity_id)

    assert [lic.name for lic in workspace.licenses.items] == ['Zoom']
    assert [s.code for s in workspace.seats.items] == ['Zoom-001']
