from typing import List

from orgdesk.models import Team
from orgdesk.repositories import TeamRepository

from .base import BaseAccessor


class TeamAccessor(BaseAccessor):
    """Teams of the active organization, by name."""

    entity = 'teams'

    def __init__(self, repository: TeamRepository, scope, cache_store, ttl=15):
        super().__init__(repository, scope, cache_store, ttl)

    @property
    def teams(self) -> List[Team]:
        return self.items

    async def create(self, name: str, description: str = None, organization_id: str = None) -> Team:
        team = Team(
            name=name,
            description=description,
            organization_id=self._require_organization(organization_id)
        )
        team.prepare_for_save()
        return await self._mutate('create', lambda: self.repository.create(team))

    async def update(self, team_id: str, **changes) -> Team:
        data = await self._prepare_update('update', team_id, changes)
        return await self._mutate('update', lambda: self.repository.update(team_id, data))

    async def delete(self, team_id: str):
        """Deletes a team; its members stay, without a team."""
        await self._mutate('delete', lambda: self.repository.delete(team_id),
                           affected=[self, *self.dependents])
