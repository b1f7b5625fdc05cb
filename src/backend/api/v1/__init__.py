"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.admin import router as admin_router
from api.v1.config import router as config_router
from api.v1.groups import router as groups_router
from api.v1.results import router as results_router
from api.v1.votes import router as votes_router

router = APIRouter()

router.include_router(groups_router, prefix="/groups", tags=["Groups"])
router.include_router(votes_router, prefix="/votes", tags=["Votes"])
router.include_router(results_router, prefix="/results", tags=["Results"])
router.include_router(config_router, prefix="/config", tags=["Config"])
router.include_router(admin_router, prefix="/admin", tags=["Admin"])
