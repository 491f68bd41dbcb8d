"""Key-value storage contract used by the card store.

The card store only needs get/set/remove on string keys, which keeps it
independent of the persistence medium (process memory, local files, Cosmos DB).
"""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised when the storage medium cannot complete an operation."""

    pass


class KeyValueStorage(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
