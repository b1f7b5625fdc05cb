"""
Tests for the HTTP voting client against the in-process API.
"""

import httpx
import pytest
from httpx import AsyncClient

from client.api_client import VotingClient
from client.storage import FileStorage
from core.errors import (
    DuplicateVoteError,
    GroupNotFoundError,
    InputValidationError,
    ResultsHiddenError,
    StoreError,
    VotingDisabledError,
)


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "client.json")


@pytest.fixture
async def voting_client(client: AsyncClient, storage: FileStorage):
    async with VotingClient("http://test", storage, http_client=client) as vc:
        yield vc


@pytest.mark.unit
class TestVotingClient:
    async def test_submit_vote_records_locally(self, voting_client: VotingClient, sample_groups, vote_repo) -> None:
        vote = await voting_client.submit_vote(sample_groups[0].id, 4)

        assert vote["group_name"] == "Drama Club"
        assert vote["device_id"] == voting_client.device_id
        assert voting_client.history.has_voted(sample_groups[0].id)
        assert await voting_client.has_voted(sample_groups[0].id)
        assert len(vote_repo.votes) == 1

    async def test_known_duplicate_never_reaches_server(
        self, voting_client: VotingClient, sample_groups, vote_repo
    ) -> None:
        voting_client.history.record_vote(sample_groups[0].id)

        with pytest.raises(DuplicateVoteError):
            await voting_client.submit_vote(sample_groups[0].id, 4)
        assert vote_repo.votes == {}

    async def test_server_duplicate_is_remembered(self, voting_client: VotingClient, sample_groups, vote_repo) -> None:
        vote_repo.add(sample_groups[1], 3, voting_client.device_id)

        with pytest.raises(DuplicateVoteError):
            await voting_client.submit_vote(sample_groups[1].id, 5)
        assert voting_client.history.has_voted(sample_groups[1].id)

    async def test_server_errors_map_to_exceptions(
        self, voting_client: VotingClient, sample_groups, config_repo
    ) -> None:
        with pytest.raises(GroupNotFoundError):
            await voting_client.submit_vote("missing", 3)

        with pytest.raises(InputValidationError) as exc_info:
            await voting_client.submit_vote(sample_groups[0].id, 9)
        assert exc_info.value.errors == [exc_info.value.message]

        await config_repo.update({"voting_enabled": False, "results_visible": False})
        with pytest.raises(VotingDisabledError):
            await voting_client.submit_vote(sample_groups[0].id, 3)
        with pytest.raises(ResultsHiddenError):
            await voting_client.get_results()

        assert not voting_client.history.has_voted(sample_groups[0].id)

    async def test_list_groups_and_config(self, voting_client: VotingClient, sample_groups) -> None:
        groups = await voting_client.list_groups()
        config = await voting_client.get_config()

        assert [g["name"] for g in groups] == ["Drama Club", "Choir", "Dance Team"]
        assert config["voting_enabled"] is True

    async def test_unreachable_server_is_store_error(self, storage: FileStorage) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://test")
        async with VotingClient("http://test", storage, http_client=http_client) as vc:
            with pytest.raises(StoreError) as exc_info:
                await vc.list_groups()

        assert exc_info.value.retryable
        await http_client.aclose()

    async def test_requires_context_manager(self, storage: FileStorage) -> None:
        with pytest.raises(RuntimeError):
            await VotingClient("http://test", storage).list_groups()
