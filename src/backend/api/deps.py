"""
Shared dependencies for API endpoints.

Includes:
- Access to the application context and its services
- Admin API key check
"""

import secrets
from typing import Annotated, Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from core.config import settings
from core.context import AppContext
from services.admin_service import AdminService
from services.aggregation_scheduler import AggregationScheduler
from services.batch_processor import BatchProcessor
from services.config_service import ConfigService
from services.group_service import GroupService
from services.result_service import ResultService
from services.vote_service import VoteService

logger = structlog.get_logger(__name__)


# =============================================================================
# Application Context
# =============================================================================


def get_context(request: Request) -> AppContext:
    context: AppContext | None = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return context


ContextDep = Annotated[AppContext, Depends(get_context)]


def get_config_service(context: ContextDep) -> ConfigService:
    return context.config_service


def get_group_service(context: ContextDep) -> GroupService:
    return context.group_service


def get_vote_service(context: ContextDep) -> VoteService:
    return context.vote_service


def get_result_service(context: ContextDep) -> ResultService:
    return context.result_service


def get_batch_processor(context: ContextDep) -> BatchProcessor:
    return context.batch_processor


def get_scheduler(context: ContextDep) -> AggregationScheduler:
    return context.scheduler


def get_admin_service(context: ContextDep) -> AdminService:
    return context.admin_service


# =============================================================================
# Admin Access
# =============================================================================


async def require_admin(
    x_admin_key: Annotated[Optional[str], Header()] = None,
) -> None:
    """
    Check the ``X-Admin-Key`` header when ADMIN_API_KEY is configured.

    With no key configured, admin endpoints are open (local development).
    """
    expected = settings.ADMIN_API_KEY
    if not expected:
        return

    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        logger.warning("Rejected admin request with missing or invalid key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin key",
        )
