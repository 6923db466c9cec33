from abc import ABC, abstractmethod
from typing import List, Optional


class KeyValueStorage(ABC):
    """
    Host-provided persistent string storage, shaped after browser local storage.

    Implementations may raise on any call (quota, I/O, network); callers that
    treat storage as an optimization are expected to catch and log.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Returns the stored string for `key`, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Stores `value` under `key`, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Removes `key`; removing a missing key is not an error."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Returns every stored key."""
