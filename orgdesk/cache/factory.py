from typing import Dict, Type

from .base import KeyValueStorage
from .enums import StorageBackend
from .storage import FileStorage, MemoryStorage


class StorageFactory:
    def __init__(self):
        self._backends: Dict[StorageBackend, Type[KeyValueStorage]] = {}

    def register_backend(self, key: StorageBackend, storage_class: Type[KeyValueStorage]):
        self._backends[key] = storage_class

    def get(self, key: StorageBackend, **kwargs) -> KeyValueStorage:
        key = StorageBackend(key)
        if key == StorageBackend.dynamodb and key not in self._backends:
            # registered on first use, keeping boto3 out of the import path
            from .dynamodb import DynamoDbStorage
            self.register_backend(StorageBackend.dynamodb, DynamoDbStorage)

        storage_class = self._backends.get(key)
        if not storage_class:
            raise ValueError(key)
        return storage_class(**kwargs)


storage_factory = StorageFactory()

storage_factory.register_backend(key=StorageBackend.memory, storage_class=MemoryStorage)
storage_factory.register_backend(key=StorageBackend.file, storage_class=FileStorage)
