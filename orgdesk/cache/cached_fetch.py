"""
Stale-while-revalidate orchestration of one remote read.

A CachedFetch owns one logical subscription: a fetch function plus the cache
key it is stored under. ``load()`` serves a fresh cache entry immediately and
always revalidates against the remote source; when the remote read fails and
nothing is in memory yet, an expired entry is served instead.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from orgdesk.models.base_model import ModelValidationError

from .store import DEFAULT_TTL_MINUTES, CacheEntry, CacheStore

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    """Lifecycle of a CachedFetch"""
    idle = 'idle'
    loading = 'loading'
    ready = 'ready'
    error = 'error'

    def __str__(self):
        return str(self.value)


@dataclass
class CacheConfig:
    """
    Attributes:
        key (str): Cache key, namespaced by entity type and organization.
        ttl (float): Minutes a cached entry counts as fresh.
        serialize (callable): Turns a fetch result into a JSON-compatible payload.
        post_process (callable): Rebuilds a fetch result from a cached payload,
            e.g. turning ISO strings back into datetimes.
    """
    key: str
    ttl: float = DEFAULT_TTL_MINUTES
    serialize: Optional[Callable[[Any], Any]] = None
    post_process: Optional[Callable[[Any], Any]] = None


class CachedFetch:
    """Cached remote read with newest-request-wins resolution."""

    def __init__(self, fetch_fn: Callable[[], Awaitable[Any]], config: CacheConfig, cache_store: CacheStore):
        self.fetch_fn = fetch_fn
        self.config = config
        self.cache_store = cache_store

        self.data: Any = None
        self.error: Optional[Exception] = None
        self.loading = False
        self.state = FetchState.idle
        # True while `data` came from the cache and has not been revalidated
        self.stale = False

        self._sequence = 0
        self._closed = False
        self._listeners: List[Callable[['CachedFetch'], None]] = []

    @property
    def key(self) -> str:
        return self.config.key

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, callback: Callable[['CachedFetch'], None]):
        """Registers `callback(fetch)`; listeners run in registration order on every change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[['CachedFetch'], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:  # pylint: disable=W0718
                logger.exception("Listener failed for %s", self.key)

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._sequence

    def _restore(self, entry: CacheEntry) -> Any:
        if self.config.post_process is None:
            return entry.payload
        try:
            return self.config.post_process(entry.payload)
        except (ModelValidationError, ValueError, TypeError, KeyError, AttributeError):
            logger.error("Cached payload for %s could not be restored, removing it", self.key)
            self.cache_store.invalidate(self.key)
            return None

    def _store(self, result: Any):
        try:
            payload = self.config.serialize(result) if self.config.serialize else result
        except (ValueError, TypeError, AttributeError):
            logger.exception("Could not serialize result for %s, not caching it", self.key)
            return
        self.cache_store.set(self.key, payload)

    def _serve_from_cache(self) -> bool:
        entry = self.cache_store.get(self.key, self.config.ttl)
        if entry is None:
            return False
        cached = self._restore(entry)
        if cached is None:
            return False
        self.data = cached
        self.stale = True
        self.loading = False
        self.state = FetchState.ready
        self._notify()
        return True

    def _fall_back_to_expired(self):
        entry = self.cache_store.get_ignoring_expiry(self.key)
        if entry is None:
            return
        fallback = self._restore(entry)
        if fallback is not None:
            self.data = fallback
            self.stale = True
            logger.info("Using expired cache as fallback for %s", self.key)

    async def load(self, use_cache: bool = True) -> Any:
        """
        Loads the data, serving a fresh cache entry first when `use_cache` is set.

        The remote read always runs. Its errors never propagate: they are kept in
        `error`, and `data` falls back to an expired cache entry when nothing is
        in memory. A resolution superseded by a newer load/refresh is discarded.

        Returns:
            The current data after this call settles (may be None).
        """
        if self._closed:
            return self.data

        self._sequence += 1
        token = self._sequence
        self.error = None
        self.loading = True
        self.state = FetchState.loading
        self._notify()

        if use_cache:
            self._serve_from_cache()

        try:
            result = await self.fetch_fn()
        except Exception as e:  # pylint: disable=W0718
            if not self._is_current(token):
                logger.debug("Discarding superseded failure for %s", self.key)
                return self.data
            logger.error("Error fetching data for %s: %s", self.key, e)
            self.error = e
            if self.data is None:
                self._fall_back_to_expired()
            self.loading = False
            self.state = FetchState.error
            self._notify()
            return self.data

        if not self._is_current(token):
            logger.debug("Discarding superseded result for %s", self.key)
            return self.data

        self.data = result
        self.stale = False
        self.error = None
        self._store(result)
        self.loading = False
        self.state = FetchState.ready
        self._notify()
        return self.data

    async def refresh(self) -> Any:
        """Forces a remote read, ignoring any cached value."""
        return await self.load(use_cache=False)

    def invalidate_cache(self):
        """Drops the cached entry. Does not re-fetch; combine with `refresh()`."""
        self.cache_store.invalidate(self.key)

    def close(self):
        """Tears the subscription down; in-flight results are discarded when they land."""
        self._closed = True
        self._listeners.clear()
