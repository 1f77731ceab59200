"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from crisisguard.api.v1.endpoints.crisis import router as crisis_router
from crisisguard.api.v1.endpoints.health import router as health_router

api_router = APIRouter()

api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    crisis_router,
    prefix="/crisis",
    tags=["Crisis"],
)
