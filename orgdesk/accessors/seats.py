from datetime import datetime, timezone
from typing import Iterable, List

from orgdesk.models import ModelValidationError, Person, Seat
from orgdesk.repositories import SeatRepository

from .base import BaseAccessor

# Marker for "leave the seat code as it is"
UNSET = object()


class SeatAccessor(BaseAccessor):
    """Seats of every license of the active organization, in creation order."""

    entity = 'seats'

    def __init__(self, repository: SeatRepository, scope, cache_store, ttl=10):
        super().__init__(repository, scope, cache_store, ttl)

    @property
    def seats(self) -> List[Seat]:
        return self.items

    @property
    def available_seats(self) -> List[Seat]:
        return [seat for seat in self.items if not seat.is_assigned]

    def for_license(self, license_id: str) -> List[Seat]:
        return [seat for seat in self.items if seat.license_id == license_id]

    def for_person(self, person_id: str) -> List[Seat]:
        return [seat for seat in self.items if seat.person_id == person_id]

    def available_people(self, seat_id: str, people: Iterable[Person]) -> List[Person]:
        """
        People who may take `seat_id`: anyone not holding another seat of the
        same license. The seat's current occupant stays eligible.
        """
        seat = self.find(seat_id)
        if seat is None:
            return list(people)
        taken = {
            other.person_id for other in self.for_license(seat.license_id)
            if other.person_id and other.entity_id != seat_id
        }
        return [person for person in people if person.entity_id not in taken]

    def _check_one_seat_per_license(self, seat: Seat, person_id: str):
        for other in self.for_license(seat.license_id):
            if other.entity_id != seat.entity_id and other.person_id == person_id:
                raise ModelValidationError(
                    f"Person {person_id} already holds seat {other.code or other.entity_id} of this license")

    async def assign(self, seat_id: str, person_id: str, code=UNSET) -> Seat:
        """
        Gives a seat to a person, optionally relabelling it.

        Args:
            seat_id (str): The seat.
            person_id (str): The new occupant.
            code (str): New label; an empty string clears it. Left alone when omitted.
        """
        if not person_id:
            raise ModelValidationError("'person_id' is required to assign a seat")
        changes = {'person_id': person_id, 'assigned_at': datetime.now(timezone.utc)}
        if code is not UNSET:
            changes['code'] = code or None

        seat = await self._get_current('assign', seat_id)
        self._check_one_seat_per_license(seat, person_id)
        data = await self._prepare_update('assign', seat_id, changes)
        return await self._mutate('assign', lambda: self.repository.update(seat_id, data))

    async def unassign(self, seat_id: str) -> Seat:
        data = await self._prepare_update('unassign', seat_id, {'person_id': None, 'assigned_at': None})
        return await self._mutate('unassign', lambda: self.repository.update(seat_id, data))
