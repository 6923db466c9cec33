"""
Base accessor: one cached, organization-scoped collection plus the
write-then-invalidate protocol shared by every entity.
"""
import dataclasses
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from orgdesk.cache import CacheConfig, CachedFetch, CacheStore, cache_key, DEFAULT_TTL_MINUTES
from orgdesk.data.base import ConflictError, DataAdapterError, RecordNotFoundError
from orgdesk.models.base_model import BaseModel, ModelValidationError
from orgdesk.repositories.base_repository import BaseRepository
from orgdesk.scope import OrganizationScope

logger = logging.getLogger(__name__)

T = TypeVar('T')


class MutationFailureReason(str, Enum):
    """Why a write was rejected"""
    conflict = 'conflict'
    not_found = 'not_found'
    failed = 'failed'
    partial = 'partial'

    def __str__(self):
        return str(self.value)


class MutationError(Exception):
    """
    Raised when a create/update/delete/assign could not be applied.

    Attributes:
        operation (str): The operation that failed, e.g. ``create``.
        entity (str): The entity collection, e.g. ``people``.
        reason (MutationFailureReason): Typed failure reason.
        orphan_id (str): Id of a record left behind by a compound write that
            could not be compensated, if any.
    """

    def __init__(self, operation: str, entity: str, reason: MutationFailureReason,
                 message: str = None, orphan_id: str = None):
        self.operation = operation
        self.entity = entity
        self.reason = reason
        self.orphan_id = orphan_id
        super().__init__(message or f"Failed to {operation} {entity}: {reason}")

    @property
    def is_conflict(self) -> bool:
        return self.reason == MutationFailureReason.conflict


def mutation_error_from(operation: str, entity: str, error: DataAdapterError) -> MutationError:
    """Translates a data source error into the typed failure surfaced to callers."""
    if isinstance(error, ConflictError):
        reason = MutationFailureReason.conflict
    elif isinstance(error, RecordNotFoundError):
        reason = MutationFailureReason.not_found
    else:
        reason = MutationFailureReason.failed
    return MutationError(operation, entity, reason, f"Failed to {operation} {entity}: {error}")


class BaseAccessor:
    """
    Cached collection of one entity type for the active organization.

    Subclasses set `entity` (also the cache key prefix) and add their
    entity-specific mutations on top of `_mutate`.
    """

    entity: str = None
    scoped: bool = True

    def __init__(self, repository: BaseRepository, scope: OrganizationScope,
                 cache_store: CacheStore, ttl: float = DEFAULT_TTL_MINUTES):
        self.repository = repository
        self.scope = scope
        self.cache_store = cache_store
        self.ttl = ttl
        # accessors whose collections our writes can change as a side effect
        self.dependents: List['BaseAccessor'] = []
        self._listeners: List[Callable[[CachedFetch], None]] = []

        self._organization_id = scope.organization_id if self.scoped else None
        self._fetch = self._build_fetch(self._organization_id)
        if self.scoped:
            scope.subscribe(self._on_organization_changed)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, items={len(self.items)})"

    @property
    def key(self) -> str:
        return self._fetch.key

    @property
    def organization_id(self) -> Optional[str]:
        return self._organization_id

    @property
    def items(self) -> List[BaseModel]:
        return self._fetch.data or []

    @property
    def loading(self) -> bool:
        return self._fetch.loading

    @property
    def error(self) -> Optional[Exception]:
        return self._fetch.error

    @property
    def state(self):
        return self._fetch.state

    @property
    def stale(self) -> bool:
        return self._fetch.stale

    def find(self, entity_id: str) -> Optional[BaseModel]:
        """Looks a record up in the loaded collection."""
        return next((item for item in self.items if item.entity_id == entity_id), None)

    def add_listener(self, callback: Callable[[CachedFetch], None]):
        """Registers `callback` for state changes, kept across organization switches."""
        self._listeners.append(callback)
        self._fetch.add_listener(callback)

    def _cache_key(self, organization_id: Optional[str]) -> str:
        if not self.scoped:
            return self.entity
        return cache_key(self.entity, organization_id)

    def _build_fetch(self, organization_id: Optional[str]) -> CachedFetch:
        model = self.repository.model
        config = CacheConfig(
            key=self._cache_key(organization_id),
            ttl=self.ttl,
            serialize=lambda items: [item.as_dict(convert_datetime_to_iso_string=True) for item in items],
            post_process=lambda payload: [model.from_dict(row) for row in payload]
        )
        fetch = CachedFetch(lambda: self._fetch_items(organization_id), config, self.cache_store)
        for callback in self._listeners:
            fetch.add_listener(callback)
        return fetch

    async def _fetch_items(self, organization_id: Optional[str]) -> List[BaseModel]:
        if not self.scoped:
            return await self.repository.get_many()
        if organization_id is None:
            logger.info("%s: No current organization, returning empty list", self.entity)
            return []
        logger.info("%s: Fetching for organization: %s", self.entity, organization_id)
        items = await self.repository.get_for_organization(organization_id)
        logger.info("%s: Fetched %s records", self.entity, len(items))
        return items

    async def _on_organization_changed(self, message: Dict[str, Any]):
        organization_id = message.get('organization_id')
        if organization_id == self._organization_id:
            return
        self._fetch.close()
        self._organization_id = organization_id
        self._fetch = self._build_fetch(organization_id)
        await self._fetch.load()

    async def load(self) -> List[BaseModel]:
        """Serves the cache when fresh and revalidates against the remote source."""
        await self._fetch.load()
        return self.items

    async def refresh(self) -> List[BaseModel]:
        """Reads the remote source, ignoring the cache."""
        await self._fetch.refresh()
        return self.items

    def invalidate_cache(self):
        self._fetch.invalidate_cache()

    def close(self):
        """Stops following organization changes and discards in-flight results."""
        if self.scoped:
            self.scope.unsubscribe(self._on_organization_changed)
        self._fetch.close()

    def _require_organization(self, organization_id: Optional[str]) -> Optional[str]:
        return organization_id or self.scope.organization_id

    async def _get_current(self, operation: str, entity_id: str) -> BaseModel:
        current = self.find(entity_id)
        if current is not None:
            return current
        try:
            current = await self.repository.get_by_id(entity_id)
        except DataAdapterError as e:
            raise mutation_error_from(operation, self.entity, e) from e
        if current is None:
            raise MutationError(operation, self.entity, MutationFailureReason.not_found,
                                f"No {self.entity} record {entity_id}")
        return current

    async def _prepare_update(self, operation: str, entity_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validates `changes` applied to the current record without writing anything.

        Returns:
            The normalized changes to send.

        Raises:
            ModelValidationError: If a field is not writable or the updated record would be invalid.
            MutationError: If the record does not exist.
        """
        model = self.repository.model
        writable = model.writable_fields()
        unknown = [k for k in changes if k not in writable]
        if unknown:
            raise ModelValidationError(f"Cannot update {', '.join(unknown)} on {self.entity}")

        current = await self._get_current(operation, entity_id)
        normalized = model.normalize(changes)
        candidate = dataclasses.replace(current, **normalized)
        candidate.prepare_for_save()
        return {k: getattr(candidate, k) for k in normalized}

    async def _invalidate_and_refresh(self, accessors: Iterable['BaseAccessor']):
        accessors = list(dict.fromkeys(accessors))
        for accessor in accessors:
            accessor.invalidate_cache()
        for accessor in accessors:
            await accessor.refresh()

    async def _mutate(self, operation: str, write: Callable[[], Awaitable[T]],
                      affected: Iterable['BaseAccessor'] = None) -> T:
        """
        Performs one remote write, then invalidates and refreshes every affected
        collection. Nothing local changes before the write is confirmed.

        Raises:
            MutationError: If the remote source rejects the write.
        """
        try:
            result = await write()
        except DataAdapterError as e:
            logger.error("Error during %s on %s: %s", operation, self.entity, e)
            raise mutation_error_from(operation, self.entity, e) from e

        await self._invalidate_and_refresh(affected if affected is not None else [self])
        return result
