"""
One session against a data source: the organization scope, the cache store and
every entity accessor, wired together.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from orgdesk.accessors import (
    AssetAccessor,
    BaseAccessor,
    LicenseAccessor,
    OrganizationAccessor,
    PeopleAccessor,
    SeatAccessor,
    TeamAccessor,
)
from orgdesk.cache import CacheStore, FetchState, KeyValueStorage
from orgdesk.config import OrgDeskConfig
from orgdesk.data.base import DataAdapter
from orgdesk.messaging import LocalMessageAdapter, MessageAdapter
from orgdesk.models import Asset, License, Person, Seat
from orgdesk.repositories import (
    AssetRepository,
    LicenseRepository,
    OrganizationRepository,
    PersonRepository,
    SeatRepository,
    TeamRepository,
)
from orgdesk.scope import OrganizationScope

logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    total_people: int = 0
    total_teams: int = 0
    total_assets: int = 0
    total_licenses: int = 0
    available_seats: int = 0
    assigned_assets: int = 0


@dataclass
class PersonDetails:
    person: Person
    assets: List[Asset] = field(default_factory=list)
    # each seat with the license it belongs to (None if not loaded)
    seats: List[Tuple[Seat, Optional[License]]] = field(default_factory=list)
    subordinates: List[Person] = field(default_factory=list)


class Workspace:
    """
    Composition root of an orgdesk session.

    Args:
        adapter (DataAdapter): The remote data source.
        storage (KeyValueStorage): Where cached collections are kept. Built from
            `config` when omitted.
        config (OrgDeskConfig): TTLs and storage backend. Read from the
            environment when omitted.
        session_storage (KeyValueStorage): Where the selected organization is
            remembered. Defaults to `storage`.
        message_adapter (MessageAdapter): Channel for organization changes.
    """

    def __init__(self, adapter: DataAdapter,
                 storage: KeyValueStorage = None,
                 config: OrgDeskConfig = None,
                 session_storage: KeyValueStorage = None,
                 message_adapter: MessageAdapter = None):
        self.config = config or OrgDeskConfig()
        self.adapter = adapter
        self.storage = storage if storage is not None else self.config.build_storage()
        self.session_storage = session_storage if session_storage is not None else self.storage
        self.message_adapter = message_adapter or LocalMessageAdapter()
        self.cache_store = CacheStore(self.storage)

        self.scope = OrganizationScope(
            OrganizationRepository(adapter), self.session_storage, self.message_adapter)

        ttl = self.config.ttl_for
        self.organizations = OrganizationAccessor(
            self.scope.repository, self.scope, self.cache_store, ttl('organizations'))
        self.people = PeopleAccessor(
            PersonRepository(adapter), self.scope, self.cache_store, ttl('people'))
        self.teams = TeamAccessor(
            TeamRepository(adapter), self.scope, self.cache_store, ttl('teams'))
        self.seats = SeatAccessor(
            SeatRepository(adapter), self.scope, self.cache_store, ttl('seats'))
        self.licenses = LicenseAccessor(
            LicenseRepository(adapter), self.scope, self.cache_store, seats=self.seats, ttl=ttl('licenses'))
        self.assets = AssetAccessor(
            AssetRepository(adapter), self.scope, self.cache_store, ttl('assets'))

        # deleting a person releases seats and assets; deleting a team empties its members' team
        self.people.dependents = [self.seats, self.assets]
        self.teams.dependents = [self.people]

    @property
    def accessors(self) -> List[BaseAccessor]:
        return [self.organizations, self.people, self.teams, self.licenses, self.seats, self.assets]

    @property
    def scoped_accessors(self) -> List[BaseAccessor]:
        return [accessor for accessor in self.accessors if accessor.scoped]

    async def start(self):
        """
        Resolves the active organization and loads every collection.

        Accessors are loaded by the organization change the scope announces; any
        that were not (no organization exists, or it was already selected) are
        loaded here.
        """
        await self.scope.initialize()
        await self.organizations.load()
        for accessor in self.scoped_accessors:
            if accessor.state == FetchState.idle:
                await accessor.load()
        logger.info("Workspace started for organization: %s", self.scope.organization_id)

    async def switch_organization(self, organization_id: str):
        return await self.scope.switch_to(organization_id)

    def stats(self) -> DashboardStats:
        """Counts for the dashboard, from the loaded collections of the active organization."""
        return DashboardStats(
            total_people=len(self.people.items),
            total_teams=len(self.teams.items),
            total_assets=len(self.assets.items),
            total_licenses=len(self.licenses.items),
            available_seats=len(self.seats.available_seats),
            assigned_assets=len(self.assets.assigned_assets),
        )

    def person_details(self, person_id: str) -> Optional[PersonDetails]:
        """Everything held by a person, or None if they are not in the loaded collection."""
        person = self.people.find(person_id)
        if person is None:
            return None
        return PersonDetails(
            person=person,
            assets=self.assets.for_person(person_id),
            seats=[(seat, self.licenses.find(seat.license_id)) for seat in self.seats.for_person(person_id)],
            subordinates=self.people.subordinates(person_id),
        )

    def close(self):
        for accessor in self.accessors:
            accessor.close()
        logger.debug("Workspace closed")
