import itertools
from typing import Iterable, List

from orgdesk.models import License, Seat
from orgdesk.repositories.base_repository import BaseRepository


def seat_code(license_name: str, number: int) -> str:
    """Human label of the `number`-th seat of a license, e.g. ``Figma-003``."""
    return f"{license_name}-{number:03d}"


class SeatRepository(BaseRepository):
    table_name = 'seats'
    default_sort = [('created_at', 'ASC')]

    def __init__(self, adapter):
        super().__init__(adapter, Seat)

    async def get_for_organization(self, organization_id: str) -> List[Seat]:
        """Seats have no organization column; they are reached through their license."""
        return await self.get_many({'license.organization_id': organization_id})

    async def get_for_license(self, license_id: str) -> List[Seat]:
        return await self.get_many({'license_id': license_id})

    async def create_for_license(self, parent: License, count: int, taken: Iterable[str] = ()) -> List[Seat]:
        """
        Inserts `count` unassigned seats in one write, numbered from 1 and
        skipping any code in `taken`.
        """
        taken = set(taken)
        codes = (seat_code(parent.name, number) for number in itertools.count(1))
        rows = [
            {'license_id': parent.entity_id, 'code': code}
            for code in itertools.islice((c for c in codes if c not in taken), count)
        ]
        records = await self.adapter.insert_many(self.table_name, rows)
        return self._to_models(records)

    async def delete_many(self, entity_ids: List[str]) -> int:
        return await self.adapter.delete_many(self.table_name, {'id': list(entity_ids)})
