"""
Azure Cosmos DB session management for document storage.

Uses async Cosmos DB SDK with DefaultAzureCredential for RBAC authentication,
or a connection string when running against the local emulator.
"""

import logging
from typing import Any

from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from core.config import settings

logger = logging.getLogger(__name__)

# Container names
GROUPS_CONTAINER = "groups"
VOTES_CONTAINER = "votes"
RESULTS_CONTAINER = "results"
CONFIG_CONTAINER = "config"

# Partition key paths, used by the emulator bootstrap script
PARTITION_KEYS = {
    GROUPS_CONTAINER: "/id",
    VOTES_CONTAINER: "/group_id",
    RESULTS_CONTAINER: "/group_id",
    CONFIG_CONTAINER: "/id",
}

# Global client instances (lazy-initialized)
_cosmos_client: CosmosClient | None = None
_database: DatabaseProxy | None = None
_credential: DefaultAzureCredential | None = None


def is_cosmos_configured() -> bool:
    """Check if Cosmos DB is configured via endpoint or connection string."""
    return bool(settings.AZURE_COSMOS_ENDPOINT or settings.AZURE_COSMOS_CONNECTION_STRING)


def parse_connection_string(connection_string: str) -> tuple[str, str]:
    """
    Split an ``AccountEndpoint=...;AccountKey=...;`` string.

    Raises:
        ValueError: If either part is missing.
    """
    parts = dict(part.split("=", 1) for part in connection_string.split(";") if "=" in part)
    endpoint = parts.get("AccountEndpoint", "")
    key = parts.get("AccountKey", "")
    if not endpoint or not key:
        raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")
    return endpoint, key


async def get_cosmos_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    Supports two authentication modes:
    1. Connection string (for local development with Cosmos DB Emulator)
    2. DefaultAzureCredential/RBAC (for Azure deployment)

    The client is singleton and reused across requests.
    """
    global _cosmos_client, _credential

    if _cosmos_client is None:
        if settings.AZURE_COSMOS_CONNECTION_STRING:
            endpoint, key = parse_connection_string(settings.AZURE_COSMOS_CONNECTION_STRING)
            _cosmos_client = CosmosClient(
                url=endpoint,
                credential=key,
                connection_verify=not settings.AZURE_COSMOS_DISABLE_SSL,
            )
            logger.info(
                f"Initialized Cosmos DB client for {endpoint} (connection string mode, "
                f"SSL verification: {not settings.AZURE_COSMOS_DISABLE_SSL})"
            )
        else:
            if not settings.AZURE_COSMOS_ENDPOINT:
                raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

            _credential = DefaultAzureCredential()
            _cosmos_client = CosmosClient(
                url=settings.AZURE_COSMOS_ENDPOINT,
                credential=_credential,
            )
            logger.info(f"Initialized Cosmos DB client for {settings.AZURE_COSMOS_ENDPOINT} (RBAC mode)")

    return _cosmos_client


async def get_database() -> DatabaseProxy:
    global _database

    if _database is None:
        client = await get_cosmos_client()
        _database = client.get_database_client(settings.AZURE_COSMOS_DATABASE)
        logger.info(f"Connected to database: {settings.AZURE_COSMOS_DATABASE}")

    return _database


async def get_container(container_name: str) -> ContainerProxy:
    database = await get_database()
    return database.get_container_client(container_name)


async def close_cosmos() -> None:
    """
    Close Cosmos DB connections.

    Should be called during application shutdown.
    """
    global _cosmos_client, _database, _credential

    if _cosmos_client is not None:
        await _cosmos_client.close()
        _cosmos_client = None
        _database = None
        logger.info("Closed Cosmos DB client")

    if _credential is not None:
        await _credential.close()
        _credential = None


# ============================================================================
# Utility Functions for Common Operations
# ============================================================================


def strip_system_properties(item: dict[str, Any]) -> dict[str, Any]:
    """Drop Cosmos-managed properties (_rid, _self, _etag, _attachments, _ts)."""
    return {key: value for key, value in item.items() if not key.startswith("_")}


async def create_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """
    Create a new item in the specified container.

    Raises:
        CosmosResourceExistsError: If an item with the same id already
            exists in the partition.
    """
    container = await get_container(container_name)
    return await container.create_item(body=item)


async def read_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> dict[str, Any] | None:
    """Read an item by ID and partition key. Returns None if not found."""
    container = await get_container(container_name)
    try:
        item = await container.read_item(item=item_id, partition_key=partition_key)
    except CosmosResourceNotFoundError:
        return None
    return strip_system_properties(item)


async def upsert_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    container = await get_container(container_name)
    return await container.upsert_item(body=item)


async def delete_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> bool:
    """Delete an item by ID and partition key. Returns False if it didn't exist."""
    container = await get_container(container_name)
    try:
        await container.delete_item(item=item_id, partition_key=partition_key)
    except CosmosResourceNotFoundError:
        return False
    return True


async def query_items(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
    max_items: int | None = None,
) -> list[dict[str, Any]]:
    """
    Query items using SQL-like syntax.

    Cross-partition queries are enabled automatically when no partition_key
    is given.

    Example:
        results = await query_items(
            'votes',
            'SELECT * FROM c WHERE c.group_id = @group_id',
            parameters=[{'name': '@group_id', 'value': group_id}],
            partition_key=group_id,
        )
    """
    container = await get_container(container_name)

    query_kwargs: dict[str, Any] = {
        "query": query,
    }

    if parameters:
        query_kwargs["parameters"] = parameters

    if partition_key:
        query_kwargs["partition_key"] = partition_key

    if max_items:
        query_kwargs["max_item_count"] = max_items

    items: list[dict[str, Any]] = []
    async for item in container.query_items(**query_kwargs):
        items.append(strip_system_properties(item) if isinstance(item, dict) else item)
        if max_items and len(items) >= max_items:
            break

    return items


async def query_count(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
) -> int:
    """
    Execute a ``SELECT VALUE COUNT(1)`` (or ``SUM``) query and return the integer result.
    """
    results = await query_items(container_name, query, parameters, partition_key)
    if results and isinstance(results[0], (int, float)):
        return int(results[0])
    return 0
