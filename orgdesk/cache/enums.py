"""Storage backend enum"""
from enum import Enum


class StorageBackend(str, Enum):
    """Storage backend enum"""
    memory = 'memory'
    file = 'file'
    dynamodb = 'dynamodb'

    def __str__(self):
        return str(self.value)
