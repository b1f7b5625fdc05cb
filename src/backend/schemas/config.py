"""
System settings schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PublicConfig(BaseModel):
    """Settings visible to participants."""

    voting_enabled: bool
    results_visible: bool
    update_interval: float
    current_group: Optional[str] = None

    model_config = {"from_attributes": True}


class SystemConfig(PublicConfig):
    aggregation_enabled: bool
    updated_at: Optional[datetime] = None


class ConfigUpdate(BaseModel):
    """Partial settings update; omitted fields are left unchanged."""

    voting_enabled: Optional[bool] = None
    results_visible: Optional[bool] = None
    update_interval: Optional[float] = Field(None, gt=0)
    aggregation_enabled: Optional[bool] = None
    current_group: Optional[str] = None


class UpdateIntervalRequest(BaseModel):
    update_interval: float


class CurrentGroupRequest(BaseModel):
    group_id: Optional[str] = None
