"""
Admin endpoints.

Group, vote and settings management, manual aggregation runs and scheduler
control. Every route requires the admin key when one is configured.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from api.deps import (
    get_admin_service,
    get_batch_processor,
    get_config_service,
    get_scheduler,
    require_admin,
)
from core.errors import GroupNotFoundError
from schemas.config import ConfigUpdate, CurrentGroupRequest, SystemConfig, UpdateIntervalRequest
from schemas.group import Group, GroupBulkCreate, GroupCreate, GroupReorder, GroupUpdate
from schemas.scheduler import (
    BatchRunResponse,
    HistoryEntry,
    ProcessingStatusResponse,
    SchedulerActionResponse,
    SchedulerStartRequest,
    SchedulerStatusResponse,
)
from schemas.vote import VoteDeleteResponse, VoteRecord
from services.admin_service import AdminService
from services.aggregation_scheduler import ALREADY_RUNNING_MESSAGE, AggregationScheduler, SchedulerResult
from services.batch_processor import BatchProcessor
from services.config_service import ConfigService

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

AdminDep = Annotated[AdminService, Depends(get_admin_service)]
SchedulerDep = Annotated[AggregationScheduler, Depends(get_scheduler)]


# =============================================================================
# Groups
# =============================================================================


@router.post("/groups", response_model=Group, status_code=status.HTTP_201_CREATED)
async def create_group(payload: GroupCreate, admin_service: AdminDep) -> Group:
    group = await admin_service.create_group(payload.name)
    return Group.model_validate(group)


@router.post("/groups/bulk", response_model=list[Group], status_code=status.HTTP_201_CREATED)
async def create_groups(payload: GroupBulkCreate, admin_service: AdminDep) -> list[Group]:
    groups = await admin_service.create_groups(payload.names)
    return [Group.model_validate(g) for g in groups]


@router.patch("/groups/{group_id}", response_model=Group)
async def rename_group(group_id: str, payload: GroupUpdate, admin_service: AdminDep) -> Group:
    group = await admin_service.rename_group(group_id, payload.name)
    return Group.model_validate(group)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: str, admin_service: AdminDep) -> Response:
    """Delete a group. Refused with 409 while any vote references it."""
    await admin_service.delete_group(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/groups/order", response_model=list[Group])
async def reorder_groups(payload: GroupReorder, admin_service: AdminDep) -> list[Group]:
    groups = await admin_service.reorder_groups(payload.orders)
    return [Group.model_validate(g) for g in groups]


# =============================================================================
# Votes
# =============================================================================


@router.get("/votes", response_model=list[VoteRecord])
async def list_votes(
    admin_service: AdminDep,
    group_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
) -> list[VoteRecord]:
    """All votes newest first, or those of one group, or those in a date range."""
    votes = await admin_service.list_votes(group_id=group_id, start=start, end=end)
    return [VoteRecord.model_validate(v) for v in votes]


@router.get("/votes/export")
async def export_votes(admin_service: AdminDep) -> Response:
    csv_text = await admin_service.export_votes()
    filename = f"votes-{datetime.now(timezone.utc):%Y%m%d-%H%M%S}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/votes/{vote_id}", response_model=VoteDeleteResponse)
async def delete_vote(vote_id: str, admin_service: AdminDep) -> VoteDeleteResponse:
    deleted = await admin_service.delete_vote(vote_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vote not found")
    return VoteDeleteResponse(deleted=1)


@router.delete("/votes", response_model=VoteDeleteResponse)
async def reset_votes(admin_service: AdminDep) -> VoteDeleteResponse:
    """Delete every vote."""
    count = await admin_service.reset_all_votes()
    return VoteDeleteResponse(deleted=count)


# =============================================================================
# Settings
# =============================================================================


@router.get("/config", response_model=SystemConfig)
async def get_config(admin_service: AdminDep) -> SystemConfig:
    return SystemConfig.model_validate(await admin_service.get_config())


@router.patch("/config", response_model=SystemConfig)
async def update_config(payload: ConfigUpdate, admin_service: AdminDep) -> SystemConfig:
    config = await admin_service.update_config(payload.model_dump(exclude_unset=True))
    return SystemConfig.model_validate(config)


@router.post("/config/voting/toggle", response_model=SystemConfig)
async def toggle_voting(admin_service: AdminDep) -> SystemConfig:
    return SystemConfig.model_validate(await admin_service.toggle_voting())


@router.post("/config/results/toggle", response_model=SystemConfig)
async def toggle_results(admin_service: AdminDep) -> SystemConfig:
    return SystemConfig.model_validate(await admin_service.toggle_results_visibility())


@router.put("/config/update-interval", response_model=SystemConfig)
async def set_update_interval(
    payload: UpdateIntervalRequest,
    config_service: Annotated[ConfigService, Depends(get_config_service)],
    scheduler: SchedulerDep,
) -> SystemConfig:
    """Change the aggregation interval; a running scheduler picks it up at once."""
    config = await config_service.set_update_interval(payload.update_interval)
    if scheduler.is_running():
        scheduler.restart(config.update_interval)
        logger.info("Scheduler restarted with new interval", interval=config.update_interval)
    return SystemConfig.model_validate(config)


@router.put("/config/current-group", response_model=SystemConfig)
async def set_current_group(
    payload: CurrentGroupRequest,
    admin_service: AdminDep,
    config_service: Annotated[ConfigService, Depends(get_config_service)],
) -> SystemConfig:
    if payload.group_id is not None:
        groups = await admin_service.list_groups()
        if payload.group_id not in {g.id for g in groups}:
            raise GroupNotFoundError()
    config = await config_service.set_current_group(payload.group_id)
    return SystemConfig.model_validate(config)


# =============================================================================
# Aggregation
# =============================================================================


@router.post("/aggregation/run", response_model=BatchRunResponse)
async def run_aggregation(
    batch_processor: Annotated[BatchProcessor, Depends(get_batch_processor)],
) -> BatchRunResponse:
    """Run one aggregation cycle now. Skipped if one is already running."""
    result = await batch_processor.process_batch_aggregation()
    return BatchRunResponse.model_validate(result)


@router.get("/aggregation/status", response_model=ProcessingStatusResponse)
async def get_aggregation_status(
    batch_processor: Annotated[BatchProcessor, Depends(get_batch_processor)],
) -> ProcessingStatusResponse:
    processing_status = await batch_processor.get_processing_status()
    return ProcessingStatusResponse(
        is_processing=processing_status.is_processing,
        is_enabled=await batch_processor.is_processing_enabled(),
        last_processed=processing_status.last_processed,
        history=[HistoryEntry.model_validate(e) for e in batch_processor.get_processing_history()],
    )


# =============================================================================
# Scheduler
# =============================================================================


def _scheduler_response(result: SchedulerResult) -> SchedulerActionResponse:
    if not result.success:
        conflict = result.error == ALREADY_RUNNING_MESSAGE
        code = status.HTTP_409_CONFLICT if conflict else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=result.error)
    return SchedulerActionResponse.model_validate(result)


async def _resolve_interval(requested: Optional[float], config_service: ConfigService) -> float:
    if requested is not None:
        return requested
    config = await config_service.get_config()
    return config.update_interval


@router.get("/scheduler", response_model=SchedulerStatusResponse)
async def get_scheduler_status(scheduler: SchedulerDep) -> SchedulerStatusResponse:
    return SchedulerStatusResponse.model_validate(scheduler.get_status())


@router.post("/scheduler/start", response_model=SchedulerActionResponse)
async def start_scheduler(
    scheduler: SchedulerDep,
    config_service: Annotated[ConfigService, Depends(get_config_service)],
    payload: Optional[SchedulerStartRequest] = None,
) -> SchedulerActionResponse:
    """Start periodic aggregation (defaults to the configured update interval)."""
    if scheduler.is_running():
        return _scheduler_response(scheduler.start())
    interval = await _resolve_interval(payload.interval_seconds if payload else None, config_service)
    return _scheduler_response(scheduler.start(interval))


@router.post("/scheduler/stop", response_model=SchedulerActionResponse)
async def stop_scheduler(scheduler: SchedulerDep) -> SchedulerActionResponse:
    return _scheduler_response(scheduler.stop())


@router.post("/scheduler/restart", response_model=SchedulerActionResponse)
async def restart_scheduler(
    scheduler: SchedulerDep,
    config_service: Annotated[ConfigService, Depends(get_config_service)],
    payload: Optional[SchedulerStartRequest] = None,
) -> SchedulerActionResponse:
    interval = await _resolve_interval(payload.interval_seconds if payload else None, config_service)
    return _scheduler_response(scheduler.restart(interval))


@router.delete("/scheduler/history", status_code=status.HTTP_204_NO_CONTENT)
async def clear_scheduler_history(scheduler: SchedulerDep) -> Response:
    scheduler.clear_history()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
