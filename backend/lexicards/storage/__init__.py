"""Storage backends behind a get/set/remove string key-value contract."""

import os
from functools import lru_cache

from .base import KeyValueStorage, StorageError
from .file import FileStorage
from .memory import MemoryStorage

STORAGE_BACKENDS = ("memory", "file", "cosmos")


class StorageSettings:
    """Settings for selecting the storage backend."""

    def __init__(self):
        self.backend = os.getenv("STORAGE_BACKEND", "memory").lower()
        self.path = os.getenv("STORAGE_PATH", ".lexicards-data")

    def validate(self) -> None:
        if self.backend not in STORAGE_BACKENDS:
            raise RuntimeError(
                f"Unknown STORAGE_BACKEND {self.backend!r}. "
                f"Expected one of: {', '.join(STORAGE_BACKENDS)}"
            )


@lru_cache()
def get_storage_settings() -> StorageSettings:
    """Get cached storage settings."""
    return StorageSettings()


def create_storage(settings: StorageSettings) -> KeyValueStorage:
    """Build the backend named by the settings."""
    settings.validate()
    if settings.backend == "file":
        return FileStorage(settings.path)
    if settings.backend == "cosmos":
        # Imported lazily so the Azure SDK is only touched when selected
        from .cosmos import CosmosStorage

        return CosmosStorage()
    return MemoryStorage()


# Singleton instance
_storage: KeyValueStorage | None = None


def get_storage() -> KeyValueStorage:
    """Get the process-wide storage backend."""
    global _storage
    if _storage is None:
        _storage = create_storage(get_storage_settings())
    return _storage


def reset_storage() -> None:
    """Reset the storage singleton (for testing)."""
    global _storage
    _storage = None


__all__ = [
    "KeyValueStorage",
    "StorageError",
    "FileStorage",
    "MemoryStorage",
    "StorageSettings",
    "get_storage_settings",
    "create_storage",
    "get_storage",
    "reset_storage",
]
