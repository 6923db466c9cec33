"""
TTL cache over a KeyValueStorage.

Every entry is persisted as ``{"payload": ..., "timestamp": <epoch ms>}``.
Caching is an optimization only: storage failures are logged and swallowed,
and corrupt entries are removed and reported as a miss.
"""
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .base import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 30
NO_ORGANIZATION = 'no-org'


def cache_key(entity: str, organization_id: Optional[str]) -> str:
    """
    Namespaces a cache key by entity type and organization, e.g. ``people-<org id>``.
    """
    return f"{entity}-{organization_id or NO_ORGANIZATION}"


@dataclass
class CacheEntry:
    key: str
    payload: Any
    timestamp: int

    def expires_at(self, ttl_minutes: float) -> float:
        return self.timestamp + ttl_minutes * 60 * 1000

    def is_expired(self, ttl_minutes: float, now_ms: float) -> bool:
        return now_ms >= self.expires_at(ttl_minutes)


class CacheStore:
    """Reads and writes cache entries with TTL semantics."""

    def __init__(self, storage: KeyValueStorage, clock: Callable[[], float] = time.time):
        """
        Args:
            storage (KeyValueStorage): Where entries are persisted.
            clock (callable): Returns the current time in seconds since the epoch.
        """
        self.storage = storage
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _remove_quietly(self, key: str):
        try:
            self.storage.remove_item(key)
        except Exception:  # pylint: disable=W0718
            logger.exception("Error removing cache entry for %s", key)

    def _read(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self.storage.get_item(key)
        except Exception:  # pylint: disable=W0718
            logger.exception("Error reading cache for %s", key)
            return None
        if raw is None:
            return None

        try:
            decoded = json.loads(raw)
            entry = CacheEntry(key=key, payload=decoded['payload'], timestamp=int(decoded['timestamp']))
        except (ValueError, TypeError, KeyError):
            logger.error("Corrupt cache entry for %s, removing it", key)
            self._remove_quietly(key)
            return None
        return entry

    def get(self, key: str, ttl_minutes: float = DEFAULT_TTL_MINUTES) -> Optional[CacheEntry]:
        """
        Returns the entry for `key` if it is younger than `ttl_minutes`.

        An expired entry is reported as a miss but left in storage, so it stays
        available to `get_ignoring_expiry` until overwritten or invalidated.
        """
        entry = self._read(key)
        if entry is None:
            return None
        if entry.is_expired(ttl_minutes, self._now_ms()):
            logger.info("Cache expired for %s", key)
            return None
        logger.info("Cache hit for %s", key)
        return entry

    def get_ignoring_expiry(self, key: str) -> Optional[CacheEntry]:
        """Returns the entry for `key` regardless of its age."""
        return self._read(key)

    def set(self, key: str, payload: Any) -> None:
        """Writes `payload` stamped with the current time, replacing any previous entry."""
        try:
            raw = json.dumps({'payload': payload, 'timestamp': self._now_ms()})
            self.storage.set_item(key, raw)
        except Exception:  # pylint: disable=W0718
            logger.exception("Error setting cache for %s", key)
            return
        logger.debug("Data cached for %s", key)

    def invalidate(self, key: str) -> None:
        """Removes the entry for `key`; a missing entry is not an error."""
        self._remove_quietly(key)
        logger.info("Cache invalidated for %s", key)

    def invalidate_matching(self, predicate: Callable[[str], bool]) -> int:
        """Removes every entry whose key satisfies `predicate` and returns how many."""
        try:
            keys = [key for key in self.storage.keys() if predicate(key)]
        except Exception:  # pylint: disable=W0718
            logger.exception("Error listing cache keys")
            return 0
        for key in keys:
            self._remove_quietly(key)
        return len(keys)

    def invalidate_organization(self, organization_id: str) -> int:
        """Removes every entry namespaced to `organization_id`."""
        suffix = f"-{organization_id}"
        return self.invalidate_matching(lambda key: key.endswith(suffix))
