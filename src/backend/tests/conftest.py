"""
Pytest fixtures for LiveVote backend tests.

Services run against in-memory repositories that honour the same protocols
as the Cosmos DB implementations.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from core.context import AppContext, build_context  # noqa: E402
from core.errors import DuplicateVoteError  # noqa: E402
from models.documents import (  # noqa: E402
    ConfigDocument,
    GroupDocument,
    ResultDocument,
    VoteDocument,
    utcnow,
    vote_document_id,
)


# =============================================================================
# In-memory repositories
# =============================================================================


class InMemoryGroupRepository:
    def __init__(self) -> None:
        self.groups: dict[str, GroupDocument] = {}

    async def list_all(self) -> list[GroupDocument]:
        return sorted(self.groups.values(), key=lambda g: g.order)

    async def get(self, group_id: str) -> Optional[GroupDocument]:
        return self.groups.get(group_id)

    async def count(self) -> int:
        return len(self.groups)

    async def create(self, name: str) -> GroupDocument:
        group = GroupDocument(name=name, order=await self.count() + 1)
        self.groups[group.id] = group
        return group

    async def update(self, group_id: str, patch: dict[str, Any]) -> Optional[GroupDocument]:
        group = self.groups.get(group_id)
        if group is None:
            return None
        updated = group.model_copy(update={**patch, "updated_at": utcnow()})
        self.groups[group_id] = updated
        return updated

    async def delete(self, group_id: str) -> bool:
        return self.groups.pop(group_id, None) is not None

    async def update_orders(self, orders: dict[str, int]) -> None:
        for group_id, order in orders.items():
            await self.update(group_id, {"order": order})


class InMemoryVoteRepository:
    """Rejects a second vote for the same (device, group), like the real store."""

    def __init__(self) -> None:
        self.votes: dict[str, VoteDocument] = {}

    async def exists_for(self, device_id: str, group_id: str) -> bool:
        return any(v.device_id == device_id and v.group_id == group_id for v in self.votes.values())

    async def exists_for_group(self, group_id: str) -> bool:
        return any(v.group_id == group_id for v in self.votes.values())

    async def list_by_group(self, group_id: str) -> list[VoteDocument]:
        return [v for v in self.votes.values() if v.group_id == group_id]

    async def list_all(self) -> list[VoteDocument]:
        return sorted(self.votes.values(), key=lambda v: v.created_at, reverse=True)

    async def list_by_date_range(self, start, end) -> list[VoteDocument]:
        return [v for v in await self.list_all() if start <= v.created_at <= end]

    async def list_by_device(self, device_id: str) -> list[VoteDocument]:
        return [v for v in await self.list_all() if v.device_id == device_id]

    async def count_by_group(self, group_id: str) -> int:
        return len(await self.list_by_group(group_id))

    async def total_score_by_group(self, group_id: str) -> int:
        return sum(v.score for v in await self.list_by_group(group_id))

    async def create(self, group_id: str, group_name: str, score: int, device_id: str) -> VoteDocument:
        vote_id = vote_document_id(device_id, group_id)
        if vote_id in self.votes:
            raise DuplicateVoteError()
        vote = VoteDocument(
            id=vote_id,
            group_id=group_id,
            group_name=group_name,
            score=score,
            device_id=device_id,
        )
        self.votes[vote_id] = vote
        return vote

    async def delete(self, vote_id: str) -> bool:
        return self.votes.pop(vote_id, None) is not None

    async def delete_all(self) -> int:
        count = len(self.votes)
        self.votes.clear()
        return count

    def add(self, group: GroupDocument, score: int, device_id: str, **fields: Any) -> VoteDocument:
        """Insert a vote directly, bypassing the service checks."""
        vote = VoteDocument(
            id=vote_document_id(device_id, group.id),
            group_id=group.id,
            group_name=group.name,
            score=score,
            device_id=device_id,
            **fields,
        )
        self.votes[vote.id] = vote
        return vote


class InMemoryResultRepository:
    def __init__(self) -> None:
        self.results: dict[str, ResultDocument] = {}
        self.upsert_calls = 0

    async def list_all(self) -> list[ResultDocument]:
        return sorted(self.results.values(), key=lambda r: r.rank)

    async def get(self, group_id: str) -> Optional[ResultDocument]:
        return self.results.get(group_id)

    async def upsert(self, group_id: str, patch: dict[str, Any]) -> ResultDocument:
        self.upsert_calls += 1
        existing = self.results.get(group_id)
        base = existing.model_dump() if existing else {}
        result = ResultDocument(**{**base, **patch, "id": group_id, "group_id": group_id})
        self.results[group_id] = result
        return result


class InMemoryConfigRepository:
    def __init__(self) -> None:
        self.config: Optional[ConfigDocument] = None

    async def get(self) -> ConfigDocument:
        if self.config is None:
            self.config = ConfigDocument()
        return self.config

    async def update(self, patch: dict[str, Any]) -> ConfigDocument:
        current = await self.get()
        self.config = current.model_copy(update={**patch, "updated_at": utcnow()})
        return self.config


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def group_repo() -> InMemoryGroupRepository:
    return InMemoryGroupRepository()


@pytest.fixture
def vote_repo() -> InMemoryVoteRepository:
    return InMemoryVoteRepository()


@pytest.fixture
def result_repo() -> InMemoryResultRepository:
    return InMemoryResultRepository()


@pytest.fixture
def config_repo() -> InMemoryConfigRepository:
    return InMemoryConfigRepository()


@pytest.fixture
async def context(
    group_repo: InMemoryGroupRepository,
    vote_repo: InMemoryVoteRepository,
    result_repo: InMemoryResultRepository,
    config_repo: InMemoryConfigRepository,
) -> AsyncGenerator[AppContext, None]:
    """A fresh application context per test."""
    ctx = build_context(group_repo, vote_repo, result_repo, config_repo)
    yield ctx
    ctx.scheduler.shutdown()


@pytest.fixture
async def sample_groups(group_repo: InMemoryGroupRepository) -> list[GroupDocument]:
    """Three groups in display order."""
    return [await group_repo.create(name) for name in ("Drama Club", "Choir", "Dance Team")]


@pytest.fixture
async def app(context: AppContext) -> Any:
    """Create FastAPI application for testing, wired to the in-memory context."""
    from main import create_application

    fastapi_app = create_application()
    fastapi_app.state.context = context
    return fastapi_app


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
