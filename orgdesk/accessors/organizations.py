import logging
from typing import List

from orgdesk.models import Organization
from orgdesk.repositories import OrganizationRepository

from .base import BaseAccessor

logger = logging.getLogger(__name__)


class OrganizationAccessor(BaseAccessor):
    """All organizations, independent of the active one."""

    entity = 'organizations'
    scoped = False

    def __init__(self, repository: OrganizationRepository, scope, cache_store, ttl=30):
        super().__init__(repository, scope, cache_store, ttl)

    @property
    def organizations(self) -> List[Organization]:
        return self.items

    async def create(self, name: str) -> Organization:
        organization = Organization(name=name)
        organization.prepare_for_save()
        created = await self._mutate('create', lambda: self.repository.create(organization))
        logger.info("Organization created: %s", created.name)
        return created

    async def update(self, organization_id: str, name: str) -> Organization:
        changes = await self._prepare_update('update', organization_id, {'name': name})
        updated = await self._mutate('update', lambda: self.repository.update(organization_id, changes))
        if self.scope.organization_id == organization_id:
            # keep the scope's copy in step without announcing a change
            self.scope.current = updated
        return updated

    async def delete(self, organization_id: str):
        """
        Deletes an organization and everything in it. Cached collections of that
        organization are dropped; if it was active, the scope falls back to the
        earliest remaining organization.
        """
        await self._mutate('delete', lambda: self.repository.delete(organization_id))
        removed = self.cache_store.invalidate_organization(organization_id)
        logger.info("Dropped %s cache entries of organization %s", removed, organization_id)
        if self.scope.organization_id == organization_id:
            await self.scope.clear()
            await self.scope.initialize()
