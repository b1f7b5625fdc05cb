"""
Result endpoints.

Results are served from the cache the aggregation scheduler maintains;
nothing here recomputes them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_batch_processor, get_config_service, get_result_service
from core.errors import GroupNotFoundError, ResultsHiddenError
from schemas.result import GroupResult, ResultsResponse
from schemas.scheduler import ProcessingStatusResponse
from services.batch_processor import BatchProcessor
from services.config_service import ConfigService
from services.result_service import ResultService

router = APIRouter()


async def _ensure_results_visible(config_service: ConfigService) -> None:
    if not await config_service.are_results_visible():
        raise ResultsHiddenError()


@router.get("", response_model=ResultsResponse)
async def get_results(
    result_service: Annotated[ResultService, Depends(get_result_service)],
    config_service: Annotated[ConfigService, Depends(get_config_service)],
) -> ResultsResponse:
    """Ranked results, best first."""
    await _ensure_results_visible(config_service)

    results = await result_service.get_all_results()
    stamps = [r.updated_at for r in results if r.updated_at is not None]
    return ResultsResponse(
        results=[GroupResult.model_validate(r) for r in results],
        last_updated=max(stamps) if stamps else None,
    )


@router.get("/status", response_model=ProcessingStatusResponse)
async def get_results_status(
    batch_processor: Annotated[BatchProcessor, Depends(get_batch_processor)],
) -> ProcessingStatusResponse:
    """Whether an aggregation run is in flight and when results last changed."""
    status = await batch_processor.get_processing_status()
    return ProcessingStatusResponse(
        is_processing=status.is_processing,
        is_enabled=await batch_processor.is_processing_enabled(),
        last_processed=status.last_processed,
        history=[],
    )


@router.get("/{group_id}", response_model=GroupResult)
async def get_group_result(
    group_id: str,
    result_service: Annotated[ResultService, Depends(get_result_service)],
    config_service: Annotated[ConfigService, Depends(get_config_service)],
) -> GroupResult:
    await _ensure_results_visible(config_service)

    result = await result_service.get_result_by_group(group_id)
    if result is None:
        raise GroupNotFoundError("No results for this group yet")
    return GroupResult.model_validate(result)
