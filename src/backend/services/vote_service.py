"""
Vote Service

Handles vote submission and vote queries.

Submission runs, in order: input validation, the voting-enabled switch,
group lookup, the duplicate check, and finally the insert. The store also
rejects a second vote for the same (device, group) pair, which closes the
window between the duplicate check and the insert.
"""

from datetime import datetime
from typing import Any

import structlog

from core.errors import (
    DuplicateVoteError,
    GroupNotFoundError,
    InputValidationError,
    LiveVoteError,
    StoreError,
    VotingDisabledError,
)
from core.validation import validate_vote_input
from models.documents import VoteDocument
from repositories.provider import (
    ConfigRepositoryProtocol,
    GroupRepositoryProtocol,
    VoteRepositoryProtocol,
)

logger = structlog.get_logger(__name__)


class VoteService:
    """Service for casting and querying votes."""

    def __init__(
        self,
        vote_repo: VoteRepositoryProtocol,
        group_repo: GroupRepositoryProtocol,
        config_repo: ConfigRepositoryProtocol,
    ):
        self.vote_repo = vote_repo
        self.group_repo = group_repo
        self.config_repo = config_repo

    async def has_voted(self, device_id: str, group_id: str) -> bool:
        """Authoritative duplicate check against the vote store."""
        try:
            return await self.vote_repo.exists_for(device_id, group_id)
        except Exception as e:
            logger.error("vote_check_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to check vote status") from e

    async def submit_vote(self, group_id: Any, score: Any, device_id: Any) -> VoteDocument:
        """
        Cast a vote.

        Raises:
            InputValidationError: Input failed validation; ``errors`` lists
                every failed check.
            VotingDisabledError: Voting is switched off.
            GroupNotFoundError: The group does not exist.
            DuplicateVoteError: The device already voted for the group.
            StoreError: The store failed.
        """
        validation = validate_vote_input(group_id, score, device_id)
        if not validation.is_valid:
            raise InputValidationError(validation.errors[0], validation.errors)

        try:
            config = await self.config_repo.get()
        except Exception as e:
            logger.error("vote_config_failed", error=str(e))
            raise StoreError("Failed to submit vote") from e
        if not config.voting_enabled:
            raise VotingDisabledError()

        try:
            group = await self.group_repo.get(group_id)
        except Exception as e:
            logger.error("vote_group_lookup_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to submit vote") from e
        if group is None:
            raise GroupNotFoundError()

        if await self.has_voted(device_id, group_id):
            logger.info("duplicate_vote_rejected", group_id=group_id)
            raise DuplicateVoteError()

        try:
            vote = await self.vote_repo.create(
                group_id=group_id,
                group_name=group.name,
                score=int(score),
                device_id=device_id,
            )
        except DuplicateVoteError:
            logger.info("duplicate_vote_rejected_by_store", group_id=group_id)
            raise
        except Exception as e:
            logger.error("vote_save_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to save vote") from e

        logger.info("vote_cast", group_id=group_id, score=vote.score)
        return vote

    async def get_vote_history(self, device_id: str) -> list[VoteDocument]:
        """Get a device's votes, newest first."""
        try:
            return await self.vote_repo.list_by_device(device_id)
        except Exception as e:
            logger.error("vote_history_failed", error=str(e))
            raise StoreError("Failed to fetch vote history") from e

    async def get_votes_by_group(self, group_id: str) -> list[VoteDocument]:
        try:
            return await self.vote_repo.list_by_group(group_id)
        except Exception as e:
            logger.error("group_votes_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to fetch votes for group") from e

    async def get_all_votes(self) -> list[VoteDocument]:
        try:
            return await self.vote_repo.list_all()
        except Exception as e:
            logger.error("vote_list_failed", error=str(e))
            raise StoreError("Failed to fetch vote list") from e

    async def get_votes_by_date_range(self, start: datetime, end: datetime) -> list[VoteDocument]:
        if start > end:
            raise InputValidationError("Start date must be before end date")
        try:
            return await self.vote_repo.list_by_date_range(start, end)
        except Exception as e:
            logger.error("vote_range_failed", error=str(e))
            raise StoreError("Failed to fetch votes for date range") from e

    async def get_vote_count(self, group_id: str) -> int:
        try:
            return await self.vote_repo.count_by_group(group_id)
        except Exception as e:
            logger.error("vote_count_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to count votes") from e

    async def get_total_score(self, group_id: str) -> int:
        try:
            return await self.vote_repo.total_score_by_group(group_id)
        except Exception as e:
            logger.error("vote_total_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to total scores") from e

    async def delete_vote(self, vote_id: str) -> bool:
        if not vote_id:
            raise InputValidationError("Vote ID is required")
        try:
            deleted = await self.vote_repo.delete(vote_id)
        except LiveVoteError:
            raise
        except Exception as e:
            logger.error("vote_delete_failed", vote_id=vote_id, error=str(e))
            raise StoreError("Failed to delete vote") from e

        if deleted:
            logger.info("vote_deleted", vote_id=vote_id)
        return deleted

    async def delete_all_votes(self) -> int:
        try:
            count = await self.vote_repo.delete_all()
        except Exception as e:
            logger.error("vote_reset_failed", error=str(e))
            raise StoreError("Failed to reset votes") from e

        logger.warning("all_votes_deleted", count=count)
        return count
