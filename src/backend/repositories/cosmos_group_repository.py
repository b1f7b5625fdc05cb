"""
Cosmos DB Group repository.

Groups are few and small, so each lives in its own partition (/id).
"""

import asyncio
import logging
from typing import Any, Optional

from db.cosmos_session import (
    GROUPS_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
    read_item,
    upsert_item,
)
from models.documents import GroupDocument, utcnow

logger = logging.getLogger(__name__)


class CosmosGroupRepository:
    """Repository for group operations using Cosmos DB."""

    async def list_all(self) -> list[GroupDocument]:
        """Get all groups ordered by their display order."""
        # "order" is a reserved word in Cosmos SQL, hence the bracket syntax
        results = await query_items(GROUPS_CONTAINER, 'SELECT * FROM c ORDER BY c["order"] ASC')
        return [GroupDocument(**r) for r in results]

    async def get(self, group_id: str) -> Optional[GroupDocument]:
        item = await read_item(GROUPS_CONTAINER, group_id, partition_key=group_id)
        return GroupDocument(**item) if item else None

    async def count(self) -> int:
        return await query_count(GROUPS_CONTAINER, "SELECT VALUE COUNT(1) FROM c")

    async def create(self, name: str) -> GroupDocument:
        """Create a group at the end of the display order."""
        next_order = await self.count() + 1
        group = GroupDocument(name=name, order=next_order)
        await create_item(GROUPS_CONTAINER, group.model_dump(mode="json"))
        logger.info(f"Created group {group.id} ({name}) at position {next_order}")
        return group

    async def update(self, group_id: str, patch: dict[str, Any]) -> Optional[GroupDocument]:
        """Merge ``patch`` into a group. Returns None if the group doesn't exist."""
        existing = await self.get(group_id)
        if existing is None:
            return None

        updated = existing.model_copy(update={**patch, "id": group_id, "updated_at": utcnow()})
        await upsert_item(GROUPS_CONTAINER, updated.model_dump(mode="json"))
        return updated

    async def delete(self, group_id: str) -> bool:
        return await delete_item(GROUPS_CONTAINER, group_id, partition_key=group_id)

    async def update_orders(self, orders: dict[str, int]) -> None:
        """Apply ``{group_id: order}`` to each listed group."""
        await asyncio.gather(
            *(self.update(group_id, {"order": order}) for group_id, order in orders.items())
        )
