"""
Vote-related Pydantic schemas.

Score is accepted loosely here and validated by the vote service, so that a
bad score and a bad device id are reported together.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    group_id: Optional[str] = None
    score: Any = None
    device_id: Optional[str] = None


class VoteRecord(BaseModel):
    """A stored vote."""

    id: str
    group_id: str
    group_name: str
    score: int
    device_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class VoteResponse(BaseModel):
    """Response after successfully casting a vote."""

    success: bool = True
    message: str = "Vote recorded"
    vote: VoteRecord


class VoteStatus(BaseModel):
    """Whether a device has voted for a group."""

    group_id: str
    device_id: str
    has_voted: bool


class VoteDeleteResponse(BaseModel):
    deleted: int = Field(..., description="Number of votes removed")
