"""Repository modules for document store access."""

from repositories.cosmos_config_repository import CosmosConfigRepository
from repositories.cosmos_group_repository import CosmosGroupRepository
from repositories.cosmos_result_repository import CosmosResultRepository
from repositories.cosmos_vote_repository import CosmosVoteRepository

__all__ = [
    "CosmosConfigRepository",
    "CosmosGroupRepository",
    "CosmosResultRepository",
    "CosmosVoteRepository",
]
