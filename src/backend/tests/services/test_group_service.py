"""
Tests for group management.
"""

from unittest.mock import AsyncMock

import pytest

from core.errors import GroupHasVotesError, GroupNotFoundError, InputValidationError, StoreError
from core.validation import GROUP_NAME_REQUIRED_MESSAGE, GROUP_NAME_TOO_LONG_MESSAGE


@pytest.mark.unit
class TestAddGroup:
    async def test_round_trip_with_next_order(self, context, sample_groups) -> None:
        previous_count = len(sample_groups)

        created = await context.group_service.add_group("  Brass Band  ")
        fetched = await context.group_service.get_group_by_id(created.id)

        assert fetched is not None
        assert fetched.name == "Brass Band"
        assert fetched.order == previous_count + 1

    async def test_first_group_gets_order_one(self, context) -> None:
        group = await context.group_service.add_group("Choir")
        assert group.order == 1

    @pytest.mark.parametrize(
        ("name", "message"),
        [("", GROUP_NAME_REQUIRED_MESSAGE), ("   ", GROUP_NAME_REQUIRED_MESSAGE), ("x" * 51, GROUP_NAME_TOO_LONG_MESSAGE)],
    )
    async def test_invalid_names(self, context, name, message) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            await context.group_service.add_group(name)
        assert exc_info.value.message == message

    async def test_store_failure(self, context, group_repo) -> None:
        group_repo.create = AsyncMock(side_effect=RuntimeError("boom"))
        with pytest.raises(StoreError) as exc_info:
            await context.group_service.add_group("Choir")
        assert exc_info.value.message == "Failed to add group"


@pytest.mark.unit
class TestGroupQueries:
    async def test_list_in_display_order(self, context, sample_groups) -> None:
        groups = await context.group_service.get_all_groups()
        assert [g.name for g in groups] == ["Drama Club", "Choir", "Dance Team"]

    async def test_missing_group_is_none(self, context) -> None:
        assert await context.group_service.get_group_by_id("missing") is None
        assert await context.group_service.get_group_by_id("") is None

    async def test_list_failure_uses_domain_message(self, context, group_repo) -> None:
        group_repo.list_all = AsyncMock(side_effect=RuntimeError("network"))
        with pytest.raises(StoreError) as exc_info:
            await context.group_service.get_all_groups()
        assert exc_info.value.message == "Failed to fetch group list"


@pytest.mark.unit
class TestUpdateGroup:
    async def test_rename_trims_and_stamps(self, context, sample_groups) -> None:
        updated = await context.group_service.update_group(sample_groups[0].id, {"name": " Theatre "})
        assert updated.name == "Theatre"
        assert updated.updated_at is not None

    async def test_unknown_group(self, context) -> None:
        with pytest.raises(GroupNotFoundError):
            await context.group_service.update_group("missing", {"name": "X"})

    async def test_unknown_fields_rejected(self, context, sample_groups) -> None:
        with pytest.raises(InputValidationError):
            await context.group_service.update_group(sample_groups[0].id, {"color": "red"})

    async def test_reorder(self, context, sample_groups) -> None:
        drama, choir, dance = sample_groups
        await context.group_service.update_group_orders({drama.id: 3, choir.id: 1, dance.id: 2})

        groups = await context.group_service.get_all_groups()
        assert [g.id for g in groups] == [choir.id, dance.id, drama.id]

    @pytest.mark.parametrize("order", [0, -1, True, 1.5, "2"])
    async def test_reorder_rejects_non_positive_integers(self, context, sample_groups, order) -> None:
        with pytest.raises(InputValidationError):
            await context.group_service.update_group_orders({sample_groups[0].id: order})

        group = await context.group_service.get_group_by_id(sample_groups[0].id)
        assert group.order == 1


@pytest.mark.unit
class TestDeleteGroup:
    async def test_delete_group_without_votes(self, context, sample_groups) -> None:
        await context.group_service.delete_group(sample_groups[0].id)
        assert await context.group_service.get_group_by_id(sample_groups[0].id) is None

    async def test_group_with_votes_is_kept(self, context, sample_groups, vote_repo) -> None:
        vote_repo.add(sample_groups[0], 4, "device-a")

        with pytest.raises(GroupHasVotesError):
            await context.group_service.delete_group(sample_groups[0].id)

        assert await context.group_service.get_group_by_id(sample_groups[0].id) is not None
        assert await context.group_service.has_votes(sample_groups[0].id) is True

    async def test_delete_missing_group(self, context) -> None:
        with pytest.raises(GroupNotFoundError):
            await context.group_service.delete_group("missing")
