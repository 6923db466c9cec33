from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class DataAdapterError(Exception):
    """Raised when the remote data source fails to read or write."""


class ConflictError(DataAdapterError):
    """Raised when a write would violate a uniqueness rule."""

    def __init__(self, table: str, columns: Tuple[str, ...], message: str = None):
        self.table = table
        self.columns = columns
        super().__init__(message or f"Duplicate value for {', '.join(columns)} in {table}")


class RecordNotFoundError(DataAdapterError):
    """Raised when a write targets a record that does not exist."""

    def __init__(self, table: str, entity_id: str):
        self.table = table
        self.entity_id = entity_id
        super().__init__(f"No record {entity_id} in {table}")


class DataAdapter(ABC):
    """Abstract base class for the remote data source.

    Rows are plain dicts with snake_case keys, an `id` column and ISO 8601
    `created_at`/`updated_at` strings. Every operation is a suspension point.
    """

    @abstractmethod
    async def select(self, table: str, conditions: Dict[str, Any] = None,
                     sort: List[Tuple[str, str]] = None) -> List[Dict[str, Any]]:
        """Fetches every row of `table` matching `conditions`, ordered by `sort`."""

    @abstractmethod
    async def get_one(self, table: str, conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Fetches a single row matching `conditions`, or None."""

    @abstractmethod
    async def insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Inserts a row and returns it with its generated id and timestamps."""

    @abstractmethod
    async def insert_many(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Inserts all rows or none of them."""

    @abstractmethod
    async def update(self, table: str, entity_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Updates the given columns of a row; unspecified columns are unchanged."""

    @abstractmethod
    async def delete(self, table: str, entity_id: str) -> None:
        """Deletes a row, applying the source's referential rules."""

    @abstractmethod
    async def delete_many(self, table: str, conditions: Dict[str, Any]) -> int:
        """Deletes every row matching `conditions` and returns how many went."""
