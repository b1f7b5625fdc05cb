"""
Aggregation and scheduler schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class HistoryEntry(BaseModel):
    timestamp: datetime
    success: bool
    processed_groups: Optional[int] = None
    processing_time: Optional[float] = None
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class BatchRunResponse(BaseModel):
    success: bool
    processed_groups: Optional[int] = None
    processing_time: Optional[float] = None
    error: Optional[str] = None
    skipped: bool = False

    model_config = {"from_attributes": True}


class ProcessingStatusResponse(BaseModel):
    is_processing: bool
    is_enabled: bool
    last_processed: Optional[datetime] = None
    history: list[HistoryEntry]


class SchedulerStartRequest(BaseModel):
    interval_seconds: Optional[float] = None


class SchedulerActionResponse(BaseModel):
    success: bool
    interval: Optional[float] = None
    previous_interval: Optional[float] = None
    new_interval: Optional[float] = None
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class SchedulerStatusResponse(BaseModel):
    is_running: bool
    interval: Optional[float] = None
    next_execution: Optional[datetime] = None
    execution_history: list[HistoryEntry]

    model_config = {"from_attributes": True}
