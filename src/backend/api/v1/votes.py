"""
Vote endpoints.

Participants vote anonymously with a device id. The server is the
authoritative duplicate check; whatever the client remembers locally is
only a hint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.deps import get_vote_service
from core.errors import InputValidationError
from core.validation import is_valid_device_id
from schemas.vote import VoteCreate, VoteRecord, VoteResponse, VoteStatus
from services.vote_service import VoteService

router = APIRouter()


@router.post("", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    vote_data: VoteCreate,
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
) -> VoteResponse:
    """
    Cast a 1-5 score for a group.

    Rejections:
    - 400: invalid group selection, score or device id (all reported)
    - 403: voting is closed
    - 404: unknown group
    - 409: this device already voted for this group
    - 503: storage failure, try again
    """
    vote = await vote_service.submit_vote(
        group_id=vote_data.group_id,
        score=vote_data.score,
        device_id=vote_data.device_id,
    )
    return VoteResponse(vote=VoteRecord.model_validate(vote))


@router.get("/status", response_model=VoteStatus)
async def get_vote_status(
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
    group_id: str = Query(..., min_length=1),
    device_id: str = Query(..., min_length=1),
) -> VoteStatus:
    """Check whether a device has already voted for a group."""
    if not is_valid_device_id(device_id):
        raise InputValidationError("Invalid device ID")
    has_voted = await vote_service.has_voted(device_id, group_id)
    return VoteStatus(group_id=group_id, device_id=device_id, has_voted=has_voted)


@router.get("/history/{device_id}", response_model=list[VoteRecord])
async def get_vote_history(
    device_id: str,
    vote_service: Annotated[VoteService, Depends(get_vote_service)],
) -> list[VoteRecord]:
    """A device's votes, newest first."""
    if not is_valid_device_id(device_id):
        raise InputValidationError("Invalid device ID")
    votes = await vote_service.get_vote_history(device_id)
    return [VoteRecord.model_validate(v) for v in votes]
