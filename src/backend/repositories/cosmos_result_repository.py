"""
Cosmos DB Result repository.

One document per group, keyed (and partitioned) by group_id. The contents
are a cache of the aggregation pipeline's output.
"""

from typing import Any, Optional

from db.cosmos_session import (
    RESULTS_CONTAINER,
    query_items,
    read_item,
    upsert_item,
)
from models.documents import ResultDocument


class CosmosResultRepository:
    """Repository for cached results using Cosmos DB."""

    async def list_all(self) -> list[ResultDocument]:
        """Get all cached results, best rank first."""
        results = await query_items(RESULTS_CONTAINER, "SELECT * FROM c ORDER BY c.rank ASC")
        return [ResultDocument(**r) for r in results]

    async def get(self, group_id: str) -> Optional[ResultDocument]:
        item = await read_item(RESULTS_CONTAINER, group_id, partition_key=group_id)
        return ResultDocument(**item) if item else None

    async def upsert(self, group_id: str, patch: dict[str, Any]) -> ResultDocument:
        """Merge ``patch`` into the group's result, creating it if absent."""
        existing = await read_item(RESULTS_CONTAINER, group_id, partition_key=group_id) or {}
        merged = ResultDocument(**{**existing, **patch, "id": group_id, "group_id": group_id})
        await upsert_item(RESULTS_CONTAINER, merged.model_dump(mode="json"))
        return merged
