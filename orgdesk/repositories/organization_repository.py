from typing import Optional

from orgdesk.models import Organization
from orgdesk.repositories.base_repository import BaseRepository


class OrganizationRepository(BaseRepository):
    table_name = 'organizations'
    default_sort = [('created_at', 'ASC')]

    def __init__(self, adapter):
        super().__init__(adapter, Organization)

    async def find_first(self) -> Optional[Organization]:
        """The earliest-created organization, if any exist."""
        organizations = await self.get_many()
        return organizations[0] if organizations else None

    async def find_by_name(self, name: str) -> Optional[Organization]:
        return await self.get_one({'name': name})
