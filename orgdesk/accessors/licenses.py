import logging
from typing import List

from orgdesk.data.base import DataAdapterError
from orgdesk.models import License, ModelValidationError
from orgdesk.repositories import LicenseRepository

from .base import BaseAccessor, MutationError, MutationFailureReason, mutation_error_from
from .seats import SeatAccessor

logger = logging.getLogger(__name__)


class LicenseAccessor(BaseAccessor):
    """
    Licenses of the active organization, by name.

    A license owns exactly `total_seats` seats. Creating a license and its
    seats takes two writes; if the second one fails the license row is deleted
    again before the failure is reported.
    """

    entity = 'licenses'

    def __init__(self, repository: LicenseRepository, scope, cache_store,
                 seats: SeatAccessor, ttl=15):
        super().__init__(repository, scope, cache_store, ttl)
        self.seats = seats

    @property
    def licenses(self) -> List[License]:
        return self.items

    async def _compensate_create(self, created: License, error: DataAdapterError):
        logger.error("Error creating seats for license %s: %s", created.entity_id, error)
        orphan_id = None
        try:
            await self.repository.delete(created.entity_id)
        except DataAdapterError:
            logger.exception("Could not remove license %s after its seats failed", created.entity_id)
            orphan_id = created.entity_id
        await self._invalidate_and_refresh([self, self.seats])
        raise MutationError(
            'create', self.entity, MutationFailureReason.partial,
            f"Seats for license {created.name!r} could not be created: {error}",
            orphan_id=orphan_id
        ) from error

    async def create(self, name: str, total_seats: int, description: str = None,
                     organization_id: str = None) -> License:
        """
        Creates a license with `total_seats` unassigned seats coded
        ``<name>-001``, ``<name>-002``, ...

        Raises:
            ModelValidationError: If a field is missing or invalid; nothing is written.
            MutationError: `conflict` for a duplicate name, `partial` when the seats
                could not be created (the license is removed again; `orphan_id` is
                set if even that failed).
        """
        new_license = License(
            name=name,
            description=description,
            total_seats=total_seats,
            organization_id=self._require_organization(organization_id)
        )
        new_license.prepare_for_save()

        try:
            created = await self.repository.create(new_license)
        except DataAdapterError as e:
            logger.error("Error adding license: %s", e)
            raise mutation_error_from('create', self.entity, e) from e

        try:
            await self.seats.repository.create_for_license(created, created.total_seats)
        except DataAdapterError as e:
            await self._compensate_create(created, e)

        await self._invalidate_and_refresh([self, self.seats])
        return created

    async def _seat_changes(self, current: License, new_total: int):
        """Works out which seats to add or drop to reach `new_total`."""
        seats = await self.seats.repository.get_for_license(current.entity_id)
        if new_total >= len(seats):
            return new_total - len(seats), [seat.code for seat in seats if seat.code], []
        free = [seat for seat in seats if not seat.is_assigned]
        surplus = len(seats) - new_total
        if len(free) < surplus:
            raise ModelValidationError(
                f"Cannot reduce to {new_total} seats: only {len(free)} of {len(seats)} are unassigned")
        # drop the most recently created free seats first
        return 0, [], [seat.entity_id for seat in free[-surplus:]]

    async def update(self, license_id: str, **changes) -> License:
        """
        Updates a license. Changing `total_seats` adds seats, or removes unassigned
        ones; it is rejected when too few seats are free.
        """
        current = await self._get_current('update', license_id)
        data = await self._prepare_update('update', license_id, changes)
        new_total = data.get('total_seats', current.total_seats)
        previous = {k: getattr(current, k) for k in data}

        try:
            to_add, taken, to_remove = await self._seat_changes(current, new_total)
        except DataAdapterError as e:
            raise mutation_error_from('update', self.entity, e) from e

        try:
            updated = await self.repository.update(license_id, data)
        except DataAdapterError as e:
            logger.error("Error updating license: %s", e)
            raise mutation_error_from('update', self.entity, e) from e

        if to_add or to_remove:
            try:
                if to_add:
                    await self.seats.repository.create_for_license(updated, to_add, taken)
                if to_remove:
                    await self.seats.repository.delete_many(to_remove)
            except DataAdapterError as e:
                await self._compensate_update(current, previous, e)
            await self._invalidate_and_refresh([self, self.seats])
        else:
            await self._invalidate_and_refresh([self])
        return updated

    async def _compensate_update(self, current: License, previous: dict, error: DataAdapterError):
        """Writes back every field the failed update changed."""
        logger.error("Error resizing seats of license %s: %s", current.entity_id, error)
        orphan_id = None
        try:
            await self.repository.update(current.entity_id, previous)
        except DataAdapterError:
            logger.exception("Could not restore license %s", current.entity_id)
            orphan_id = current.entity_id
        await self._invalidate_and_refresh([self, self.seats])
        raise MutationError(
            'update', self.entity, MutationFailureReason.partial,
            f"Seats of license {current.name!r} could not be resized: {error}",
            orphan_id=orphan_id
        ) from error

    async def delete(self, license_id: str):
        """Deletes a license together with its seats."""
        await self._mutate('delete', lambda: self.repository.delete(license_id),
                           affected=[self, self.seats])
