"""
Result Service

Ranks aggregated group results and caches them in the results store.
"""

import asyncio
from datetime import datetime
from typing import Any, Optional

import structlog

from core.errors import StoreError
from models.documents import ResultDocument, utcnow
from repositories.provider import ResultRepositoryProtocol
from services.aggregation_service import AggregationResult

logger = structlog.get_logger(__name__)


class ResultService:
    """Ranking and the result cache."""

    def __init__(self, result_repo: ResultRepositoryProtocol):
        self.result_repo = result_repo

    @staticmethod
    def calculate_ranking(results: list[AggregationResult]) -> list[AggregationResult]:
        """
        Assign standard competition ranks (1, 1, 3, ...) by average score.

        The sort is stable, so groups with equal averages keep their input
        order. Ties compare the already rounded averages exactly. The input
        list and its items are left untouched.
        """
        ordered = sorted(results, key=lambda r: r.average_score, reverse=True)

        ranked: list[AggregationResult] = []
        for position, result in enumerate(ordered, start=1):
            if ranked and result.average_score == ranked[-1].average_score:
                rank = ranked[-1].rank
            else:
                rank = position
            ranked.append(result.with_rank(rank))
        return ranked

    async def cache_results(self, results: list[AggregationResult]) -> None:
        """
        Write each result to the cache keyed by group_id.

        Writes are independent per group and stamped with the current time.
        An empty list performs no writes.
        """
        if not results:
            return

        updated_at = utcnow()
        try:
            await asyncio.gather(
                *(
                    self.result_repo.upsert(
                        result.group_id,
                        {**result.to_cache_fields(), "updated_at": updated_at},
                    )
                    for result in results
                )
            )
        except Exception as e:
            logger.error("result_cache_failed", groups=len(results), error=str(e))
            raise StoreError("Failed to cache results") from e

        logger.debug("results_cached", groups=len(results))

    async def get_all_results(self) -> list[ResultDocument]:
        """Get cached results, best rank first."""
        try:
            return await self.result_repo.list_all()
        except Exception as e:
            logger.error("result_list_failed", error=str(e))
            raise StoreError("Failed to fetch results") from e

    async def get_result_by_group(self, group_id: str) -> Optional[ResultDocument]:
        try:
            return await self.result_repo.get(group_id)
        except Exception as e:
            logger.error("result_fetch_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to fetch result") from e

    async def update_result(self, group_id: str, patch: dict[str, Any]) -> ResultDocument:
        try:
            return await self.result_repo.upsert(group_id, {**patch, "updated_at": utcnow()})
        except Exception as e:
            logger.error("result_update_failed", group_id=group_id, error=str(e))
            raise StoreError("Failed to update result") from e

    async def get_latest_update_time(self) -> Optional[datetime]:
        """Most recent ``updated_at`` across cached results, or None."""
        results = await self.get_all_results()
        stamps = [r.updated_at for r in results if r.updated_at is not None]
        return max(stamps) if stamps else None
