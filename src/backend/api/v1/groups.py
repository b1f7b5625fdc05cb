"""
Group endpoints (read-only; groups are managed through the admin API).
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_group_service
from core.errors import GroupNotFoundError
from schemas.group import Group
from services.group_service import GroupService

router = APIRouter()


@router.get("", response_model=list[Group])
async def list_groups(
    group_service: Annotated[GroupService, Depends(get_group_service)],
) -> list[Group]:
    """List groups in display order."""
    groups = await group_service.get_all_groups()
    return [Group.model_validate(g) for g in groups]


@router.get("/{group_id}", response_model=Group)
async def get_group(
    group_id: str,
    group_service: Annotated[GroupService, Depends(get_group_service)],
) -> Group:
    group = await group_service.get_group_by_id(group_id)
    if group is None:
        raise GroupNotFoundError()
    return Group.model_validate(group)
