"""
Group-related Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    name: str


class GroupBulkCreate(BaseModel):
    names: list[str] = Field(..., min_length=1)


class GroupUpdate(BaseModel):
    name: str


class GroupReorder(BaseModel):
    """New display positions keyed by group id; values are checked by the service."""

    orders: dict[str, Any]


class Group(BaseModel):
    id: str
    name: str
    order: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
