"""
Result-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class GroupResult(BaseModel):
    """Cached aggregate and rank for one group."""

    group_id: str
    group_name: str
    total_score: int
    vote_count: int
    average_score: float
    rank: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ResultsResponse(BaseModel):
    results: list[GroupResult]
    last_updated: Optional[datetime] = None
