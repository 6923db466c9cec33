"""Module for caching"""
from .base import KeyValueStorage
from .enums import StorageBackend
from .storage import MemoryStorage, FileStorage
from .store import CacheEntry, CacheStore, cache_key, DEFAULT_TTL_MINUTES
from .cached_fetch import CacheConfig, CachedFetch, FetchState
from .factory import StorageFactory, storage_factory
