import asyncio
import logging

from orgdesk.accessors import MutationError
from orgdesk.cache import MemoryStorage
from orgdesk.data import MemoryDataAdapter
from orgdesk.models import ModelValidationError
from orgdesk.workspace import Workspace

logging.basicConfig(level=logging.INFO)


async def main():
    adapter = MemoryDataAdapter(latency=0.05)
    storage = MemoryStorage()

    await adapter.insert('organizations', {'name': 'Acme'})
    other = await adapter.insert('organizations', {'name': 'Globex'})

    ####################
    # #### Session ######
    ####################

    print("\n\n##### Session #######\n\n")

    workspace = Workspace(adapter, storage)
    await workspace.start()
    print("current organization", workspace.scope.current)

    ####################
    # #### People #######
    ####################

    print("\n\n##### People #######\n\n")

    boss = await workspace.people.create('grace@acme.test', 'Grace', 'CTO')
    ana = await workspace.people.create('ana@acme.test', 'Ana', 'Engineer', reports_to=boss.entity_id)

    try:
        await workspace.people.create('ana@acme.test', 'Ana Again', 'Designer')
    except MutationError as e:
        print("rejected:", e.reason, e)

    try:
        await workspace.people.create('not-an-email', 'Bob', 'Engineer')
    except ModelValidationError as e:
        print("invalid:", e)

    print("people", [p.name for p in workspace.people.items])

    ####################
    # #### Licenses #####
    ####################

    print("\n\n##### Licenses #######\n\n")

    figma = await workspace.licenses.create('Figma', 3, 'Design tool')
    print("seats", [s.code for s in workspace.seats.for_license(figma.entity_id)])

    seat = workspace.seats.for_license(figma.entity_id)[0]
    await workspace.seats.assign(seat.entity_id, ana.entity_id)
    await workspace.assets.create('Laptop', 'Lenovo', '1499.00', serial_number='SN-42', person_id=ana.entity_id)

    print("stats", workspace.stats())
    print("ana", workspace.person_details(ana.entity_id))

    ####################
    # #### Switching ####
    ####################

    print("\n\n##### Switching #######\n\n")

    await workspace.switch_organization(other['id'])
    print("people in Globex", [p.name for p in workspace.people.items])

    await workspace.switch_organization(figma.organization_id)
    print("people in Acme (served from cache, then revalidated)", [p.name for p in workspace.people.items])

    workspace.close()


if __name__ == '__main__':
    asyncio.run(main())
