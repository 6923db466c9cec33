from datetime import datetime, timezone
from typing import List

from orgdesk.models import Asset, ModelValidationError
from orgdesk.repositories import AssetRepository

from .base import BaseAccessor


def _as_value(value) -> float:
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise ModelValidationError(f"'value' must be a number, got {value!r}") from e
    return value


class AssetAccessor(BaseAccessor):
    """Assets of the active organization, newest first."""

    entity = 'assets'

    def __init__(self, repository: AssetRepository, scope, cache_store, ttl=10):
        super().__init__(repository, scope, cache_store, ttl)

    @property
    def assets(self) -> List[Asset]:
        return self.items

    @property
    def assigned_assets(self) -> List[Asset]:
        return [asset for asset in self.items if asset.person_id]

    def for_person(self, person_id: str) -> List[Asset]:
        return [asset for asset in self.items if asset.person_id == person_id]

    async def create(self, name: str, brand: str, value, serial_number: str = None,
                     person_id: str = None, organization_id: str = None) -> Asset:
        asset = Asset(
            name=name,
            brand=brand,
            value=_as_value(value),
            serial_number=serial_number,
            person_id=person_id or None,
            assigned_at=datetime.now(timezone.utc) if person_id else None,
            organization_id=self._require_organization(organization_id)
        )
        asset.prepare_for_save()
        return await self._mutate('create', lambda: self.repository.create(asset))

    async def update(self, asset_id: str, **changes) -> Asset:
        """
        Updates the given fields of an asset. Changing `person_id` also stamps or
        clears `assigned_at`.
        """
        if 'value' in changes:
            changes['value'] = _as_value(changes['value'])
        if 'person_id' in changes and 'assigned_at' not in changes:
            changes['assigned_at'] = datetime.now(timezone.utc) if changes['person_id'] else None
        data = await self._prepare_update('update', asset_id, changes)
        return await self._mutate('update', lambda: self.repository.update(asset_id, data))

    async def assign(self, asset_id: str, person_id: str) -> Asset:
        if not person_id:
            raise ModelValidationError("'person_id' is required to assign an asset")
        return await self.update(asset_id, person_id=person_id)

    async def unassign(self, asset_id: str) -> Asset:
        return await self.update(asset_id, person_id=None)

    async def delete(self, asset_id: str):
        await self._mutate('delete', lambda: self.repository.delete(asset_id))
