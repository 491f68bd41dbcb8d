"""
Cosmos DB client and connection management.

Authentication modes:
1. Azure Managed Identity (production): Uses DefaultAzureCredential for passwordless auth
2. Azure CLI credential (local dev with Azure): Uses your `az login` session
3. Cosmos DB Emulator (local dev): Uses emulator key for local development

The authentication mode is automatically selected based on environment:
- If COSMOS_EMULATOR=true, uses emulator with default key
- Otherwise, uses DefaultAzureCredential
"""

import os
import logging
from functools import lru_cache
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy, PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.identity import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"

# Storage items are keyed by their id
STORAGE_PARTITION_KEY_PATH = "/id"


class CosmosDBSettings:
    """Settings for Cosmos DB connection."""

    def __init__(self):
        self.endpoint = os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "lexicards")
        self.storage_container = os.getenv("COSMOS_STORAGE_CONTAINER", "storage")
        self.use_emulator = os.getenv("COSMOS_EMULATOR", "false").lower() == "true"

    def is_configured(self) -> bool:
        """Check if Cosmos DB is configured."""
        if self.use_emulator:
            return True
        return bool(self.endpoint)


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def get_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    For local development with the emulator, set COSMOS_EMULATOR=true.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT environment variable, or COSMOS_EMULATOR=true for local emulator."
            )

        if settings.use_emulator:
            logger.info("Using Cosmos DB Emulator at %s", EMULATOR_ENDPOINT)
            _client = CosmosClient(
                EMULATOR_ENDPOINT,
                credential=EMULATOR_KEY,
                connection_verify=False  # Emulator uses self-signed cert
            )
        else:
            logger.info("Using DefaultAzureCredential for Cosmos DB at %s", settings.endpoint)
            credential = DefaultAzureCredential()
            _client = CosmosClient(settings.endpoint, credential=credential)

    return _client


def get_database() -> DatabaseProxy:
    """Get or create the database proxy."""
    global _database
    if _database is None:
        settings = get_settings()
        client = get_client()
        _database = client.create_database_if_not_exists(id=settings.database_name)
    return _database


def get_storage_container() -> ContainerProxy:
    """Get the key-value storage container, creating it on first use."""
    settings = get_settings()
    return get_database().create_container_if_not_exists(
        id=settings.storage_container,
        partition_key=PartitionKey(path=STORAGE_PARTITION_KEY_PATH),
    )


def verify_connection() -> bool:
    """Verify the Cosmos DB connection is working."""
    try:
        settings = get_settings()
        if not settings.is_configured():
            return False
        get_database().read()
        return True
    except CosmosHttpResponseError as e:
        logger.warning(f"Cosmos DB rejected connection check: {e}")
        return False
    except Exception as e:
        logger.warning(f"Cosmos DB connection check failed: {e}")
        return False


def close_client():
    """Drop the cached Cosmos DB client and database proxy."""
    global _client, _database
    # CosmosClient manages connections internally; clearing references is enough
    _client = None
    _database = None
