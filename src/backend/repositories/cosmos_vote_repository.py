"""
Cosmos DB Vote repository.

Partition key is group_id for efficient per-group aggregation queries.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from azure.cosmos.exceptions import CosmosResourceExistsError
from pydantic import TypeAdapter

from core.errors import DuplicateVoteError
from db.cosmos_session import (
    VOTES_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
)
from models.documents import VoteDocument, vote_document_id

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(datetime)


def _to_stored_timestamp(value: datetime) -> str:
    """Format a datetime the same way documents are serialized."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return _datetime_adapter.dump_python(value.astimezone(timezone.utc), mode="json")


class CosmosVoteRepository:
    """
    Repository for vote operations using Cosmos DB.

    One vote per (device, group) is enforced twice: callers check
    exists_for() first, and the deterministic document id makes the
    store reject a second insert for the same pair.
    """

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def exists_for(self, device_id: str, group_id: str) -> bool:
        """Check whether a device has already voted for a group."""
        query = """
            SELECT VALUE COUNT(1) FROM c
            WHERE c.device_id = @device_id
              AND c.group_id = @group_id
        """
        count = await query_count(
            VOTES_CONTAINER,
            query,
            parameters=[
                {"name": "@device_id", "value": device_id},
                {"name": "@group_id", "value": group_id},
            ],
            partition_key=group_id,
        )
        return count > 0

    async def exists_for_group(self, group_id: str) -> bool:
        """Check whether any vote references the group."""
        return await self.count_by_group(group_id) > 0

    async def list_by_group(self, group_id: str) -> list[VoteDocument]:
        query = "SELECT * FROM c WHERE c.group_id = @group_id"
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@group_id", "value": group_id}],
            partition_key=group_id,
        )
        return [VoteDocument(**r) for r in results]

    async def list_all(self) -> list[VoteDocument]:
        """
        Get every vote, newest first.

        Note: This is a cross-partition query - admin use only.
        """
        query = "SELECT * FROM c ORDER BY c.created_at DESC"
        results = await query_items(VOTES_CONTAINER, query)
        return [VoteDocument(**r) for r in results]

    async def list_by_date_range(self, start: datetime, end: datetime) -> list[VoteDocument]:
        """Get votes cast between start and end (inclusive), newest first."""
        query = """
            SELECT * FROM c
            WHERE c.created_at >= @start
              AND c.created_at <= @end
            ORDER BY c.created_at DESC
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[
                {"name": "@start", "value": _to_stored_timestamp(start)},
                {"name": "@end", "value": _to_stored_timestamp(end)},
            ],
        )
        return [VoteDocument(**r) for r in results]

    async def list_by_device(self, device_id: str) -> list[VoteDocument]:
        """Get a device's votes, newest first."""
        query = """
            SELECT * FROM c
            WHERE c.device_id = @device_id
            ORDER BY c.created_at DESC
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@device_id", "value": device_id}],
        )
        return [VoteDocument(**r) for r in results]

    async def count_by_group(self, group_id: str) -> int:
        query = "SELECT VALUE COUNT(1) FROM c WHERE c.group_id = @group_id"
        return await query_count(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@group_id", "value": group_id}],
            partition_key=group_id,
        )

    async def total_score_by_group(self, group_id: str) -> int:
        query = "SELECT VALUE SUM(c.score) FROM c WHERE c.group_id = @group_id"
        return await query_count(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@group_id", "value": group_id}],
            partition_key=group_id,
        )

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(
        self,
        group_id: str,
        group_name: str,
        score: int,
        device_id: str,
    ) -> VoteDocument:
        """
        Create a vote record.

        Raises:
            DuplicateVoteError: If the device already voted for the group.
        """
        vote = VoteDocument(
            id=vote_document_id(device_id, group_id),
            group_id=group_id,
            group_name=group_name,
            score=score,
            device_id=device_id,
        )

        try:
            await create_item(VOTES_CONTAINER, vote.model_dump(mode="json"))
        except CosmosResourceExistsError as e:
            raise DuplicateVoteError() from e

        logger.debug(f"Created vote for group {group_id}")
        return vote

    async def _find_location(self, vote_id: str) -> Optional[str]:
        """Find the partition (group_id) holding a vote."""
        results = await query_items(
            VOTES_CONTAINER,
            "SELECT c.id, c.group_id FROM c WHERE c.id = @id",
            parameters=[{"name": "@id", "value": vote_id}],
            max_items=1,
        )
        if not results:
            return None
        return results[0]["group_id"]

    async def delete(self, vote_id: str) -> bool:
        """Delete a vote by id. Returns False if no such vote exists."""
        group_id = await self._find_location(vote_id)
        if group_id is None:
            return False
        deleted = await delete_item(VOTES_CONTAINER, vote_id, partition_key=group_id)
        if deleted:
            logger.info(f"Deleted vote {vote_id} from group {group_id}")
        return deleted

    async def delete_all(self) -> int:
        """Delete every vote. Returns the number of deleted documents."""
        locations = await query_items(VOTES_CONTAINER, "SELECT c.id, c.group_id FROM c")
        deleted = await asyncio.gather(
            *(delete_item(VOTES_CONTAINER, row["id"], partition_key=row["group_id"]) for row in locations)
        )
        count = sum(1 for ok in deleted if ok)
        logger.warning(f"Deleted {count} votes")
        return count
