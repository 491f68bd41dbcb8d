"""Cosmos DB storage backend: one item per key."""

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from lexicards.db import get_storage_container

from .base import KeyValueStorage, StorageError


class CosmosStorage(KeyValueStorage):
    """Stores values as `{"id": key, "value": value}` items partitioned by id."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the storage with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_storage_container()
        return self._container

    def get(self, key: str) -> str | None:
        try:
            item = self.container.read_item(item=key, partition_key=key)
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as e:
            raise StorageError(f"Failed to read {key!r} from Cosmos DB: {e}") from e
        return item.get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.container.upsert_item(body={"id": key, "value": value})
        except CosmosHttpResponseError as e:
            raise StorageError(f"Failed to write {key!r} to Cosmos DB: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.container.delete_item(item=key, partition_key=key)
        except CosmosResourceNotFoundError:
            pass
        except CosmosHttpResponseError as e:
            raise StorageError(f"Failed to remove {key!r} from Cosmos DB: {e}") from e
