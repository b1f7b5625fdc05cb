"""Schemas module initialization."""

from schemas.config import ConfigUpdate, PublicConfig, SystemConfig
from schemas.group import Group, GroupCreate, GroupUpdate
from schemas.result import GroupResult, ResultsResponse
from schemas.scheduler import BatchRunResponse, SchedulerStatusResponse
from schemas.vote import VoteCreate, VoteRecord, VoteResponse, VoteStatus

__all__ = [
    "Group",
    "GroupCreate",
    "GroupUpdate",
    "VoteCreate",
    "VoteRecord",
    "VoteResponse",
    "VoteStatus",
    "GroupResult",
    "ResultsResponse",
    "PublicConfig",
    "SystemConfig",
    "ConfigUpdate",
    "BatchRunResponse",
    "SchedulerStatusResponse",
]
