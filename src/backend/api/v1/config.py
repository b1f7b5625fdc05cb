"""
Public system settings endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_config_service
from schemas.config import PublicConfig
from services.config_service import ConfigService

router = APIRouter()


@router.get("", response_model=PublicConfig)
async def get_public_config(
    config_service: Annotated[ConfigService, Depends(get_config_service)],
) -> PublicConfig:
    """Voting and results switches for participant screens."""
    config = await config_service.get_config()
    return PublicConfig.model_validate(config)
