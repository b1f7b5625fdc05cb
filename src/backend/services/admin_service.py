"""
Admin Service

Administrative operations on votes, groups and settings, plus CSV export.
"""

from datetime import datetime
from typing import Any, Optional

import structlog

from core.errors import InputValidationError
from core.validation import group_name_errors
from models.documents import ConfigDocument, GroupDocument, VoteDocument
from services.config_service import ConfigService
from services.group_service import GroupService
from services.vote_service import VoteService

logger = structlog.get_logger(__name__)

CSV_HEADER = "groupId,groupName,score,deviceId,createdAt"


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_votes_to_csv(votes: list[VoteDocument]) -> str:
    """
    Render votes as CSV, one row per vote under a fixed header.

    An empty vote list yields the header line alone.
    """
    rows = [CSV_HEADER]
    for vote in votes:
        rows.append(
            ",".join(
                [
                    vote.group_id,
                    vote.group_name,
                    str(vote.score),
                    vote.device_id,
                    _format_timestamp(vote.created_at),
                ]
            )
        )
    return "\n".join(rows)


class AdminService:
    """Facade over the vote, group and config services for administrators."""

    def __init__(
        self,
        vote_service: VoteService,
        group_service: GroupService,
        config_service: ConfigService,
    ):
        self.vote_service = vote_service
        self.group_service = group_service
        self.config_service = config_service

    # ========================================================================
    # Votes
    # ========================================================================

    async def list_votes(
        self,
        group_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[VoteDocument]:
        """List votes, optionally for one group or a date range (not both)."""
        if group_id and (start or end):
            raise InputValidationError("Filter by group or by date range, not both")
        if (start is None) != (end is None):
            raise InputValidationError("Both start and end dates are required")

        if group_id:
            return await self.vote_service.get_votes_by_group(group_id)
        if start is not None and end is not None:
            return await self.vote_service.get_votes_by_date_range(start, end)
        return await self.vote_service.get_all_votes()

    async def delete_vote(self, vote_id: str) -> bool:
        return await self.vote_service.delete_vote(vote_id)

    async def reset_all_votes(self) -> int:
        count = await self.vote_service.delete_all_votes()
        logger.warning("votes_reset_by_admin", count=count)
        return count

    async def export_votes(self) -> str:
        votes = await self.vote_service.get_all_votes()
        logger.info("votes_exported", count=len(votes))
        return export_votes_to_csv(votes)

    # ========================================================================
    # Groups
    # ========================================================================

    async def list_groups(self) -> list[GroupDocument]:
        return await self.group_service.get_all_groups()

    async def create_group(self, name: str) -> GroupDocument:
        return await self.group_service.add_group(name)

    async def create_groups(self, names: list[str]) -> list[GroupDocument]:
        """
        Create several groups in the given order.

        Every name is validated before any group is written.
        """
        if not names:
            raise InputValidationError("At least one group name is required")

        errors = [message for name in names for message in group_name_errors(name)]
        if errors:
            raise InputValidationError(errors[0], errors)

        created = []
        for name in names:
            created.append(await self.group_service.add_group(name))
        return created

    async def rename_group(self, group_id: str, name: str) -> GroupDocument:
        return await self.group_service.update_group(group_id, {"name": name})

    async def delete_group(self, group_id: str) -> None:
        await self.group_service.delete_group(group_id)

    async def reorder_groups(self, orders: dict[str, int]) -> list[GroupDocument]:
        await self.group_service.update_group_orders(orders)
        return await self.group_service.get_all_groups()

    # ========================================================================
    # Settings
    # ========================================================================

    async def get_config(self) -> ConfigDocument:
        return await self.config_service.get_config()

    async def update_config(self, patch: dict[str, Any]) -> ConfigDocument:
        return await self.config_service.update_config(patch)

    async def toggle_voting(self) -> ConfigDocument:
        config = await self.config_service.get_config()
        return await self.config_service.set_voting_enabled(not config.voting_enabled)

    async def toggle_results_visibility(self) -> ConfigDocument:
        config = await self.config_service.get_config()
        return await self.config_service.set_results_visible(not config.results_visible)
