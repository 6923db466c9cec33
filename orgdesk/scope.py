"""
The active organization of a session.

The scope resolves which organization the session works in, persists the
choice, and announces every change on the ``organization_changed`` queue of
its message adapter. Accessors subscribe and re-derive their cache keys from
the announced id.
"""
import logging
from typing import Callable, Optional

from orgdesk.cache.base import KeyValueStorage
from orgdesk.data.base import DataAdapterError
from orgdesk.messaging.base import MessageAdapter
from orgdesk.models import ModelValidationError, Organization
from orgdesk.repositories import OrganizationRepository

logger = logging.getLogger(__name__)

ORGANIZATION_CHANGED = 'organization_changed'
CURRENT_ORGANIZATION_KEY = 'currentOrganizationId'


class OrganizationSwitchError(Exception):
    """Raised when the session cannot switch to the requested organization."""

    def __init__(self, organization_id: str, reason: str):
        self.organization_id = organization_id
        self.reason = reason
        super().__init__(f"Cannot switch to organization {organization_id}: {reason}")


class OrganizationScope:
    """Holds the single active organization for the session."""

    def __init__(self, repository: OrganizationRepository,
                 session_storage: KeyValueStorage,
                 message_adapter: MessageAdapter):
        self.repository = repository
        self.session_storage = session_storage
        self.message_adapter = message_adapter

        self.current: Optional[Organization] = None
        self.loading = False
        self.error: Optional[Exception] = None
        self._request = 0

    @property
    def organization_id(self) -> Optional[str]:
        return self.current.entity_id if self.current else None

    def get_current(self) -> Optional[Organization]:
        return self.current

    def subscribe(self, callback: Callable[[dict], object]):
        """
        Registers `callback(message)` for organization changes. Coroutine callbacks
        are awaited; subscribers run in the order they subscribed.
        """
        self.message_adapter.consume_messages(ORGANIZATION_CHANGED, callback)

    def unsubscribe(self, callback: Callable[[dict], object]):
        self.message_adapter.stop_consuming(ORGANIZATION_CHANGED, callback)

    def _read_saved_id(self) -> Optional[str]:
        try:
            return self.session_storage.get_item(CURRENT_ORGANIZATION_KEY)
        except Exception:  # pylint: disable=W0718
            logger.exception("Error reading the saved organization")
            return None

    def _save_id(self, organization_id: Optional[str]):
        try:
            if organization_id is None:
                self.session_storage.remove_item(CURRENT_ORGANIZATION_KEY)
            else:
                self.session_storage.set_item(CURRENT_ORGANIZATION_KEY, organization_id)
        except Exception:  # pylint: disable=W0718
            logger.exception("Error saving the current organization")

    async def _publish(self, previous_id: Optional[str]):
        await self.message_adapter.send_message(ORGANIZATION_CHANGED, {
            'organization_id': self.organization_id,
            'previous_organization_id': previous_id,
        })

    async def _load_saved(self, saved_id: str) -> Optional[Organization]:
        logger.info("Loading saved organization: %s", saved_id)
        try:
            return await self.repository.get_by_id(saved_id)
        except (DataAdapterError, ModelValidationError) as e:
            logger.warning("Saved organization %s could not be loaded: %s", saved_id, e)
            return None

    def _next_request(self) -> int:
        self._request += 1
        return self._request

    def _is_current(self, request: int) -> bool:
        return request == self._request

    async def initialize(self) -> Optional[Organization]:
        """
        Resolves the active organization: the saved selection if it still exists,
        otherwise the earliest-created organization, otherwise none.

        Failures are logged and kept in `error`; they never raise. A resolution
        overtaken by a later `initialize`, `switch_to` or `clear` is dropped.
        """
        request = self._next_request()
        self.loading = True
        self.error = None
        organization = None
        error = None
        try:
            saved_id = self._read_saved_id()
            if saved_id:
                organization = await self._load_saved(saved_id)
            if organization is None:
                logger.info("Loading first available organization")
                organization = await self.repository.find_first()
        except (DataAdapterError, ModelValidationError) as e:
            logger.error("Error loading current organization: %s", e)
            error = e

        if not self._is_current(request):
            logger.debug("Dropping superseded organization resolution")
            return self.current

        self.loading = False
        if error is not None:
            self.error = error
            return self.current

        previous_id = self.organization_id
        if organization is not None:
            self._save_id(organization.entity_id)
        self.current = organization
        if self.organization_id != previous_id:
            await self._publish(previous_id)
        return self.current

    async def refresh(self) -> Optional[Organization]:
        """Re-runs the initial resolution, e.g. after organizations were edited."""
        return await self.initialize()

    async def switch_to(self, organization_id: str) -> Organization:
        """
        Makes `organization_id` the active organization and notifies subscribers.

        When several switches overlap, the last one requested wins; an earlier one
        finishing later changes nothing and returns the organization then active.

        Raises:
            OrganizationSwitchError: If the organization cannot be loaded. The
                previous selection stays active and persisted.
        """
        request = self._next_request()
        self.loading = True
        try:
            organization = await self.repository.get_by_id(organization_id)
        except (DataAdapterError, ModelValidationError) as e:
            logger.error("Error switching organization: %s", e)
            if self._is_current(request):
                self.loading = False
                self.error = e
            raise OrganizationSwitchError(organization_id, str(e)) from e

        if not self._is_current(request):
            logger.info("Switch to organization %s was superseded", organization_id)
            return self.current
        self.loading = False

        if organization is None:
            self.error = OrganizationSwitchError(organization_id, "organization not found")
            raise self.error

        previous_id = self.organization_id
        self.error = None
        self._save_id(organization.entity_id)
        self.current = organization
        logger.info("Organization switched to: %s", organization.name)
        await self._publish(previous_id)
        return organization

    async def clear(self):
        """Forgets the active organization, e.g. after it was deleted."""
        self._next_request()
        self.loading = False
        previous_id = self.organization_id
        self._save_id(None)
        self.current = None
        if previous_id is not None:
            await self._publish(previous_id)
