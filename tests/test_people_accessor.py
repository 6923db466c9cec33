"""
Tests for the people and team accessors.
"""
import pytest

from orgdesk.accessors import MutationError, MutationFailureReason
from orgdesk.cache import FetchState
from orgdesk.models import ModelValidationError


@pytest.mark.asyncio
async def test_switching_organizations_never_mixes_collections(workspace, storage, seed):
    """
    A -> B -> A: each organization only ever sees its own people
    """
    a = await seed('organizations', name='A')
    b = await seed('organizations', name='B')
    await seed('people', email='ann@a.co', name='Ann', position='Dev', organization_id=a['id'])
    await seed('people', email='bob@b.co', name='Bob', position='Dev', organization_id=b['id'])
    assert workspace.people.key == 'people-no-org'

    await workspace.start()
    assert [p.name for p in workspace.people.items] == ['Ann']
    assert workspace.people.key == f"people-{a['id']}"

    await workspace.switch_organization(b['id'])
    assert [p.name for p in workspace.people.items] == ['Bob']
    assert workspace.people.organization_id == b['id']

    await workspace.switch_organization(a['id'])
    assert [p.name for p in workspace.people.items] == ['Ann']
    assert storage.get_item(f"people-{a['id']}") is not None
    assert storage.get_item(f"people-{b['id']}") is not None


@pytest.mark.asyncio
async def test_duplicate_email_is_a_conflict(workspace, start):
    await start()
    ana = await workspace.people.create('ana@example.com', 'Ana', 'Engineer')
    assert [p.entity_id for p in workspace.people.items] == [ana.entity_id]

    with pytest.raises(MutationError) as excinfo:
        await workspace.people.create('ana@example.com', 'Ana Again', 'Designer')

    assert excinfo.value.is_conflict
    assert excinfo.value.reason == MutationFailureReason.conflict
    assert excinfo.value.entity == 'people'
    assert len(workspace.people.items) == 1


@pytest.mark.asyncio
async def test_invalid_person_is_rejected_before_any_write(workspace, adapter, start):
    await start()
    calls = len(adapter.calls)

    with pytest.raises(ModelValidationError):
        await workspace.people.create('not-an-email', 'Ana', 'Engineer')
    with pytest.raises(ModelValidationError):
        await workspace.people.create('ana@example.com', '', 'Engineer')

    assert len(adapter.calls) == calls


@pytest.mark.asyncio
async def test_create_requires_an_organization(workspace):
    await workspace.start()

    with pytest.raises(ModelValidationError):
        await workspace.people.create('ana@example.com', 'Ana', 'Engineer')


@pytest.mark.asyncio
async def test_people_newest_first_and_refreshed_after_writes(workspace, start):
    await start()
    await workspace.people.create('a@x.co', 'First', 'Dev')
    await workspace.people.create('b@x.co', 'Second', 'Dev')

    assert [p.name for p in workspace.people.people] == ['Second', 'First']
    assert workspace.people.state == FetchState.ready
    assert not workspace.people.stale


@pytest.mark.asyncio
async def test_update_person(workspace, start):
    await start()
    ana = await workspace.people.create('ana@example.com', 'Ana', 'Engineer')

    updated = await workspace.people.update(ana.entity_id, position='Lead', team_id='')

    assert updated.position == 'Lead'
    assert updated.name == 'Ana'
    assert updated.team_id is None
    assert workspace.people.find(ana.entity_id).position == 'Lead'


@pytest.mark.asyncio
async def test_update_rejects_bad_input(workspace, start):
    await start()
    ana = await workspace.people.create('ana@example.com', 'Ana', 'Engineer')

    with pytest.raises(ModelValidationError):
        await workspace.people.update(ana.entity_id, salary=100)
    with pytest.raises(ModelValidationError):
        await workspace.people.update(ana.entity_id, email='nope')
    with pytest.raises(MutationError) as excinfo:
        await workspace.people.update('missing', name='Ghost')
    assert excinfo.value.reason == MutationFailureReason.not_found


@pytest.mark.asyncio
async def test_reporting_line_cannot_form_a_cycle(workspace, start):
    await start()
    boss = await workspace.people.create('boss@x.co', 'Boss', 'CEO')
    lead = await workspace.people.create('lead@x.co', 'Lead', 'CTO', reports_to=boss.entity_id)
    dev = await workspace.people.create('dev@x.co', 'Dev', 'Dev', reports_to=lead.entity_id)

    with pytest.raises(ModelValidationError):
        await workspace.people.update(boss.entity_id, reports_to=dev.entity_id)
    with pytest.raises(ModelValidationError):
        await workspace.people.update(dev.entity_id, reports_to=dev.entity_id)

    assert [p.name for p in workspace.people.subordinates(boss.entity_id)] == ['Lead']


@pytest.mark.asyncio
async def test_remote_failure_surfaces_and_keeps_collection(workspace, adapter, start):
    await start()
    await workspace.people.create('a@x.co', 'Ana', 'Dev')
    adapter.fail_next('people', 'insert')

    with pytest.raises(MutationError) as excinfo:
        await workspace.people.create('b@x.co', 'Bea', 'Dev')

    assert excinfo.value.reason == MutationFailureReason.failed
    assert [p.name for p in workspace.people.items] == ['Ana']


@pytest.mark.asyncio
async def test_teams_and_membership(workspace, start):
    await start()
    core = await workspace.teams.create('Core', 'Platform team')
    ana = await workspace.people.create('ana@x.co', 'Ana', 'Dev')
    await workspace.people.create('anton@x.co', 'Anton', 'Dev')
    await workspace.people.create('bea@x.co', 'Bea', 'Dev')

    await workspace.people.set_team(ana.entity_id, core.entity_id)

    assert [p.name for p in workspace.people.team_members(core.entity_id)] == ['Ana']
    assert [p.name for p in workspace.people.available_for_team('AN')] == ['Anton']

    await workspace.people.remove_from_team(ana.entity_id)
    assert workspace.people.team_members(core.entity_id) == []


@pytest.mark.asyncio
async def test_deleting_team_keeps_its_members(workspace, start):
    await start()
    core = await workspace.teams.create('Core')
    ana = await workspace.people.create('ana@x.co', 'Ana', 'Dev', team_id=core.entity_id)

    await workspace.teams.delete(core.entity_id)

    assert workspace.teams.teams == []
    assert workspace.people.find(ana.entity_id).team_id is None


@pytest.mark.asyncio
async def test_team_names_are_unique_and_sorted(workspace, start):
    await start()
    await workspace.teams.create('Zeta')
    await workspace.teams.create('Alpha')

    with pytest.raises(MutationError) as excinfo:
        await workspace.teams.create('Alpha')

    assert excinfo.value.is_conflict
    assert [t.name for t in workspace.teams.items] == ['Alpha', 'Zeta']

    renamed = await workspace.teams.update(workspace.teams.items[1].entity_id, name='Beta')
    assert renamed.name == 'Beta'
    assert [t.name for t in workspace.teams.items] == ['Alpha', 'Beta']


@pytest.mark.asyncio
async def test_delete_missing_person(workspace, start):
    await start()

    with pytest.raises(MutationError) as excinfo:
        await workspace.people.delete('missing')
    assert excinfo.value.reason == MutationFailureReason.not_found
