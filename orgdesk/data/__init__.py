"""data module"""

from .base import DataAdapter, DataAdapterError, ConflictError, RecordNotFoundError
from .memory import MemoryDataAdapter
