"""
Tests for vote submission and queries.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from core.errors import (
    DuplicateVoteError,
    GroupNotFoundError,
    InputValidationError,
    StoreError,
    VotingDisabledError,
)

DEVICE_ID = "device-123e4567-e89b-12d3-a456-426614174000"
OTHER_DEVICE_ID = "device-0f8fad5b-d9cb-469f-a165-70867728950e"


@pytest.mark.unit
class TestSubmitVote:
    async def test_records_vote_with_group_name_snapshot(self, context, sample_groups, vote_repo) -> None:
        choir = sample_groups[1]

        vote = await context.vote_service.submit_vote(choir.id, 4, DEVICE_ID)

        assert vote.group_id == choir.id
        assert vote.group_name == "Choir"
        assert vote.score == 4
        assert list(vote_repo.votes.values()) == [vote]

    async def test_second_vote_for_same_group_is_rejected(self, context, sample_groups, vote_repo) -> None:
        choir = sample_groups[1]
        await context.vote_service.submit_vote(choir.id, 4, DEVICE_ID)

        with pytest.raises(DuplicateVoteError) as exc_info:
            await context.vote_service.submit_vote(choir.id, 5, DEVICE_ID)

        assert "already voted" in exc_info.value.message
        matching = [v for v in vote_repo.votes.values() if v.device_id == DEVICE_ID and v.group_id == choir.id]
        assert len(matching) == 1
        assert matching[0].score == 4

    async def test_same_device_may_vote_for_other_groups(self, context, sample_groups) -> None:
        for group in sample_groups:
            await context.vote_service.submit_vote(group.id, 3, DEVICE_ID)

        assert len(await context.vote_service.get_vote_history(DEVICE_ID)) == 3

    async def test_store_level_duplicate_is_reported_as_duplicate(self, context, sample_groups, vote_repo) -> None:
        choir = sample_groups[1]
        await context.vote_service.submit_vote(choir.id, 4, DEVICE_ID)
        # Simulate the race: the pre-check misses the concurrent insert
        vote_repo.exists_for = AsyncMock(return_value=False)

        with pytest.raises(DuplicateVoteError):
            await context.vote_service.submit_vote(choir.id, 2, DEVICE_ID)

        assert len(vote_repo.votes) == 1

    async def test_validation_errors_are_all_reported(self, context, vote_repo) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            await context.vote_service.submit_vote("", 7, "nope")

        assert len(exc_info.value.errors) == 3
        assert vote_repo.votes == {}

    async def test_validation_happens_before_store_access(self, context, config_repo) -> None:
        config_repo.get = AsyncMock()

        with pytest.raises(InputValidationError):
            await context.vote_service.submit_vote("g1", 0, DEVICE_ID)

        config_repo.get.assert_not_awaited()

    async def test_voting_disabled(self, context, sample_groups, config_repo) -> None:
        await config_repo.update({"voting_enabled": False})

        with pytest.raises(VotingDisabledError):
            await context.vote_service.submit_vote(sample_groups[0].id, 3, DEVICE_ID)

    async def test_unknown_group(self, context) -> None:
        with pytest.raises(GroupNotFoundError):
            await context.vote_service.submit_vote("missing", 3, DEVICE_ID)

    async def test_store_failure_is_wrapped(self, context, sample_groups, vote_repo) -> None:
        vote_repo.create = AsyncMock(side_effect=RuntimeError("503 from store"))

        with pytest.raises(StoreError) as exc_info:
            await context.vote_service.submit_vote(sample_groups[0].id, 3, DEVICE_ID)

        assert exc_info.value.message == "Failed to save vote"
        assert "503" not in exc_info.value.message

    async def test_float_score_is_stored_as_int(self, context, sample_groups) -> None:
        vote = await context.vote_service.submit_vote(sample_groups[0].id, 5.0, DEVICE_ID)
        assert vote.score == 5
        assert isinstance(vote.score, int)


@pytest.mark.unit
class TestVoteQueries:
    async def test_has_voted(self, context, sample_groups) -> None:
        group = sample_groups[0]
        assert await context.vote_service.has_voted(DEVICE_ID, group.id) is False

        await context.vote_service.submit_vote(group.id, 3, DEVICE_ID)

        assert await context.vote_service.has_voted(DEVICE_ID, group.id) is True
        assert await context.vote_service.has_voted(OTHER_DEVICE_ID, group.id) is False

    async def test_counts_and_totals(self, context, sample_groups) -> None:
        group = sample_groups[0]
        await context.vote_service.submit_vote(group.id, 3, DEVICE_ID)
        await context.vote_service.submit_vote(group.id, 5, OTHER_DEVICE_ID)

        assert await context.vote_service.get_vote_count(group.id) == 2
        assert await context.vote_service.get_total_score(group.id) == 8
        assert len(await context.vote_service.get_votes_by_group(group.id)) == 2

    async def test_all_votes_newest_first(self, context, sample_groups, vote_repo) -> None:
        now = datetime.now(timezone.utc)
        older = vote_repo.add(sample_groups[0], 3, DEVICE_ID, created_at=now - timedelta(hours=1))
        newer = vote_repo.add(sample_groups[1], 4, DEVICE_ID, created_at=now)

        votes = await context.vote_service.get_all_votes()

        assert [v.id for v in votes] == [newer.id, older.id]

    async def test_date_range(self, context, sample_groups, vote_repo) -> None:
        now = datetime.now(timezone.utc)
        vote_repo.add(sample_groups[0], 3, DEVICE_ID, created_at=now - timedelta(days=2))
        recent = vote_repo.add(sample_groups[1], 4, DEVICE_ID, created_at=now)

        votes = await context.vote_service.get_votes_by_date_range(now - timedelta(days=1), now)

        assert [v.id for v in votes] == [recent.id]

    async def test_date_range_must_be_ordered(self, context) -> None:
        now = datetime.now(timezone.utc)
        with pytest.raises(InputValidationError):
            await context.vote_service.get_votes_by_date_range(now, now - timedelta(days=1))

    async def test_list_failure_uses_domain_message(self, context, vote_repo) -> None:
        vote_repo.list_all = AsyncMock(side_effect=ConnectionError("socket closed"))

        with pytest.raises(StoreError) as exc_info:
            await context.vote_service.get_all_votes()

        assert exc_info.value.message == "Failed to fetch vote list"


@pytest.mark.unit
class TestVoteDeletion:
    async def test_delete_vote(self, context, sample_groups) -> None:
        vote = await context.vote_service.submit_vote(sample_groups[0].id, 3, DEVICE_ID)

        assert await context.vote_service.delete_vote(vote.id) is True
        assert await context.vote_service.delete_vote(vote.id) is False

    async def test_delete_requires_id(self, context) -> None:
        with pytest.raises(InputValidationError):
            await context.vote_service.delete_vote("")

    async def test_delete_all(self, context, sample_groups) -> None:
        await context.vote_service.submit_vote(sample_groups[0].id, 3, DEVICE_ID)
        await context.vote_service.submit_vote(sample_groups[1].id, 3, DEVICE_ID)

        assert await context.vote_service.delete_all_votes() == 2
        assert await context.vote_service.get_all_votes() == []
