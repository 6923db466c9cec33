import logging
from typing import List, Optional

from orgdesk.models import ModelValidationError, Person
from orgdesk.repositories import PersonRepository

from .base import BaseAccessor

logger = logging.getLogger(__name__)


class PeopleAccessor(BaseAccessor):
    """People of the active organization, newest first."""

    entity = 'people'

    def __init__(self, repository: PersonRepository, scope, cache_store, ttl=10):
        super().__init__(repository, scope, cache_store, ttl)

    @property
    def people(self) -> List[Person]:
        return self.items

    def team_members(self, team_id: str) -> List[Person]:
        return [person for person in self.items if person.team_id == team_id]

    def available_for_team(self, search: str = '') -> List[Person]:
        """People without a team whose name contains `search` (case-insensitive)."""
        needle = search.lower()
        return [
            person for person in self.items
            if not person.team_id and needle in (person.name or '').lower()
        ]

    def subordinates(self, person_id: str) -> List[Person]:
        return [person for person in self.items if person.reports_to == person_id]

    def _check_reporting_line(self, person_id: str, manager_id: Optional[str]):
        """Rejects a manager whose own reporting chain leads back to `person_id`."""
        if not manager_id:
            return
        managers = {person.entity_id: person.reports_to for person in self.items}
        seen = set()
        current = manager_id
        while current and current not in seen:
            if current == person_id:
                raise ModelValidationError("'reports_to' would create a reporting cycle")
            seen.add(current)
            current = managers.get(current)

    async def create(self, email: str, name: str, position: str, organization_id: str = None,
                     reports_to: str = None, team_id: str = None) -> Person:
        person = Person(
            email=email,
            name=name,
            position=position,
            reports_to=reports_to,
            team_id=team_id,
            organization_id=self._require_organization(organization_id)
        )
        person.prepare_for_save()
        return await self._mutate('create', lambda: self.repository.create(person))

    async def update(self, person_id: str, **changes) -> Person:
        """
        Updates the given fields of a person. Fields not passed stay unchanged.
        """
        if 'reports_to' in changes:
            if not self.items:
                await self.load()
            self._check_reporting_line(person_id, changes['reports_to'])
        data = await self._prepare_update('update', person_id, changes)
        return await self._mutate('update', lambda: self.repository.update(person_id, data))

    async def delete(self, person_id: str):
        """
        Deletes a person. The data source releases their seats and assets, so
        those collections are refreshed as well.
        """
        await self._mutate('delete', lambda: self.repository.delete(person_id),
                           affected=[self, *self.dependents])

    async def set_team(self, person_id: str, team_id: str) -> Person:
        return await self.update(person_id, team_id=team_id)

    async def remove_from_team(self, person_id: str) -> Person:
        return await self.update(person_id, team_id=None)
