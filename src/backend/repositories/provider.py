"""
Repository provider for dependency injection.

Defines the store interfaces the services depend on and builds the Cosmos DB
implementations. Tests substitute in-memory implementations of the same
protocols.

Usage:
    from repositories.provider import get_vote_repository

    vote_repo = get_vote_repository()
    has_voted = await vote_repo.exists_for(device_id, group_id)
"""

import logging
from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from db.cosmos_session import is_cosmos_configured
from models.documents import ConfigDocument, GroupDocument, ResultDocument, VoteDocument

logger = logging.getLogger(__name__)


# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class GroupRepositoryProtocol(Protocol):
    """Protocol defining group repository operations."""

    async def list_all(self) -> list[GroupDocument]: ...
    async def get(self, group_id: str) -> Optional[GroupDocument]: ...
    async def count(self) -> int: ...
    async def create(self, name: str) -> GroupDocument: ...
    async def update(self, group_id: str, patch: dict[str, Any]) -> Optional[GroupDocument]: ...
    async def delete(self, group_id: str) -> bool: ...
    async def update_orders(self, orders: dict[str, int]) -> None: ...


@runtime_checkable
class VoteRepositoryProtocol(Protocol):
    """Protocol defining vote repository operations."""

    async def exists_for(self, device_id: str, group_id: str) -> bool: ...
    async def exists_for_group(self, group_id: str) -> bool: ...
    async def list_by_group(self, group_id: str) -> list[VoteDocument]: ...
    async def list_all(self) -> list[VoteDocument]: ...
    async def list_by_date_range(self, start: datetime, end: datetime) -> list[VoteDocument]: ...
    async def list_by_device(self, device_id: str) -> list[VoteDocument]: ...
    async def count_by_group(self, group_id: str) -> int: ...
    async def total_score_by_group(self, group_id: str) -> int: ...
    async def create(self, group_id: str, group_name: str, score: int, device_id: str) -> VoteDocument: ...
    async def delete(self, vote_id: str) -> bool: ...
    async def delete_all(self) -> int: ...


@runtime_checkable
class ResultRepositoryProtocol(Protocol):
    """Protocol defining cached result operations."""

    async def list_all(self) -> list[ResultDocument]: ...
    async def get(self, group_id: str) -> Optional[ResultDocument]: ...
    async def upsert(self, group_id: str, patch: dict[str, Any]) -> ResultDocument: ...


@runtime_checkable
class ConfigRepositoryProtocol(Protocol):
    """Protocol defining system settings operations."""

    async def get(self) -> ConfigDocument: ...
    async def update(self, patch: dict[str, Any]) -> ConfigDocument: ...


# =============================================================================
# Repository Factory Functions
# =============================================================================


def _require_cosmos() -> None:
    if not is_cosmos_configured():
        raise RuntimeError(
            "Cosmos DB is not configured. Set AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING."
        )


def get_group_repository() -> GroupRepositoryProtocol:
    _require_cosmos()
    from repositories.cosmos_group_repository import CosmosGroupRepository

    return CosmosGroupRepository()


def get_vote_repository() -> VoteRepositoryProtocol:
    _require_cosmos()
    from repositories.cosmos_vote_repository import CosmosVoteRepository

    return CosmosVoteRepository()


def get_result_repository() -> ResultRepositoryProtocol:
    _require_cosmos()
    from repositories.cosmos_result_repository import CosmosResultRepository

    return CosmosResultRepository()


def get_config_repository() -> ConfigRepositoryProtocol:
    _require_cosmos()
    from repositories.cosmos_config_repository import CosmosConfigRepository

    return CosmosConfigRepository()
