"""
Aggregation Service

Reduces raw votes into per-group statistics and runs the
aggregate -> rank -> cache pipeline.

Averages are rounded to two decimals on the floating-point quotient,
half away from zero: [5, 4, 5] gives 14 / 3 * 100 = 466.66... -> 4.67.
Because the quotient is a float, 41 / 40 * 100 is 102.4999... and gives
1.02, not 1.03.
"""

import math
from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Any, Iterable

import structlog

from core.errors import AggregationError
from models.documents import VoteDocument
from repositories.provider import GroupRepositoryProtocol, VoteRepositoryProtocol

if TYPE_CHECKING:
    from services.result_service import ResultService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    """Statistics for one group. ``rank`` is 0 until ranking assigns it."""

    group_id: str
    group_name: str
    total_score: int = 0
    vote_count: int = 0
    average_score: float = 0.0
    rank: int = 0

    def with_rank(self, rank: int) -> "AggregationResult":
        return replace(self, rank=rank)

    def to_cache_fields(self) -> dict[str, Any]:
        return asdict(self)


def count_votes(votes: Iterable[VoteDocument]) -> int:
    return sum(1 for _ in votes)


def calculate_average_score(votes: list[VoteDocument]) -> float:
    """Average score rounded to two decimals; 0 for an empty list."""
    count = len(votes)
    if count == 0:
        return 0.0
    total = sum(vote.score for vote in votes)
    # Scores are positive, so floor(x + 0.5) rounds half away from zero
    return math.floor(total / count * 100 + 0.5) / 100


def aggregate_group_votes(group_id: str, group_name: str, votes: list[VoteDocument]) -> AggregationResult:
    return AggregationResult(
        group_id=group_id,
        group_name=group_name,
        total_score=sum(vote.score for vote in votes),
        vote_count=count_votes(votes),
        average_score=calculate_average_score(votes),
    )


class AggregationService:
    """Aggregates votes for every group and feeds the result cache."""

    def __init__(
        self,
        group_repo: GroupRepositoryProtocol,
        vote_repo: VoteRepositoryProtocol,
        result_service: "ResultService",
    ):
        self.group_repo = group_repo
        self.vote_repo = vote_repo
        self.result_service = result_service

    async def aggregate_all_votes(self) -> list[AggregationResult]:
        """
        Aggregate votes for every group, in display order.

        Groups without votes are included with zero statistics. Any fetch
        failure aborts the whole run; partial results are never returned.

        Raises:
            AggregationError: If groups or a group's votes cannot be read.
        """
        try:
            groups = await self.group_repo.list_all()
        except Exception as e:
            logger.error("aggregation_group_fetch_failed", error=str(e))
            raise AggregationError("Failed to fetch groups for aggregation") from e

        results: list[AggregationResult] = []
        for group in groups:
            try:
                votes = await self.vote_repo.list_by_group(group.id)
            except Exception as e:
                logger.error("aggregation_vote_fetch_failed", group_id=group.id, error=str(e))
                raise AggregationError(f"Failed to fetch votes for group '{group.name}'") from e
            results.append(aggregate_group_votes(group.id, group.name, votes))

        return results

    async def batch_aggregate(self) -> list[AggregationResult]:
        """Aggregate, rank and cache. Returns the ranked results."""
        try:
            aggregated = await self.aggregate_all_votes()
            ranked = self.result_service.calculate_ranking(aggregated)
            await self.result_service.cache_results(ranked)
        except AggregationError:
            raise
        except Exception as e:
            logger.error("batch_aggregate_failed", error=str(e))
            raise AggregationError(f"Batch aggregation failed: {e}") from e

        logger.info("batch_aggregate_completed", groups=len(ranked))
        return ranked
