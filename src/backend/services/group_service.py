"""
Group management service.

Validates names, assigns display order and guards deletion of groups that
already have votes.
"""

from typing import Any, Optional

import structlog

from core.errors import (
    GroupHasVotesError,
    GroupNotFoundError,
    InputValidationError,
    StoreError,
)
from core.validation import group_name_errors
from models.documents import GroupDocument
from repositories.provider import GroupRepositoryProtocol, VoteRepositoryProtocol

logger = structlog.get_logger(__name__)

GROUP_FIELDS = frozenset({"name", "order"})


class GroupService:
    """Service for group CRUD with referential-integrity checks."""

    def __init__(self, group_repo: GroupRepositoryProtocol, vote_repo: VoteRepositoryProtocol):
        self.group_repo = group_repo
        self.vote_repo = vote_repo

    async def get_all_groups(self) -> list[GroupDocument]:
        """Get all groups ordered by display order."""
        try:
            return await self.group_repo.list_all()
        except Exception as e:
            logger.error("group_list_failed", error=str(e))
            raise StoreError("Failed to fetch group list") from e

    async def get_group_by_id(self, group_id: str) -> Optional[GroupDocument]:
        if not group_id:
            return None
        try:
            return await self.group_repo.get(group_id)
        except Exception as e:
            logger.error("group_fetch_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to fetch group") from e

    async def add_group(self, name: str) -> GroupDocument:
        """
        Create a group with the next display position (current count + 1).

        Raises:
            InputValidationError: If the name is empty or too long.
        """
        errors = group_name_errors(name)
        if errors:
            raise InputValidationError(errors[0], errors)

        try:
            group = await self.group_repo.create(name.strip())
        except Exception as e:
            logger.error("group_create_failed", error=str(e))
            raise StoreError("Failed to add group") from e

        logger.info("group_created", group_id=group.id, order=group.order)
        return group

    async def update_group(self, group_id: str, patch: dict[str, Any]) -> GroupDocument:
        if not group_id:
            raise InputValidationError("Group ID is required")

        unknown = set(patch) - GROUP_FIELDS
        if unknown:
            raise InputValidationError(f"Unknown group fields: {', '.join(sorted(unknown))}")

        patch = dict(patch)
        if "name" in patch:
            errors = group_name_errors(patch["name"])
            if errors:
                raise InputValidationError(errors[0], errors)
            patch["name"] = patch["name"].strip()

        try:
            group = await self.group_repo.update(group_id, patch)
        except Exception as e:
            logger.error("group_update_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to update group") from e

        if group is None:
            raise GroupNotFoundError()
        return group

    async def has_votes(self, group_id: str) -> bool:
        try:
            return await self.vote_repo.exists_for_group(group_id)
        except Exception as e:
            logger.error("group_vote_check_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to check votes for group") from e

    async def delete_group(self, group_id: str) -> None:
        """
        Delete a group that no vote references.

        Raises:
            GroupHasVotesError: If any vote references the group.
            GroupNotFoundError: If the group doesn't exist.
        """
        if not group_id:
            raise InputValidationError("Group ID is required")

        if await self.has_votes(group_id):
            raise GroupHasVotesError()

        try:
            deleted = await self.group_repo.delete(group_id)
        except Exception as e:
            logger.error("group_delete_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to delete group") from e

        if not deleted:
            raise GroupNotFoundError()
        logger.info("group_deleted", group_id=group_id)

    async def update_group_orders(self, orders: dict[str, int]) -> None:
        """Apply ``{group_id: order}`` display positions."""
        if any(
            not isinstance(order, int) or isinstance(order, bool) or order < 1
            for order in orders.values()
        ):
            raise InputValidationError("Group order must be a positive integer")
        try:
            await self.group_repo.update_orders(orders)
        except Exception as e:
            logger.error("group_reorder_failed", error=str(e))
            raise StoreError("Failed to update group order") from e
