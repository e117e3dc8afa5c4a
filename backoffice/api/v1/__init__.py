"""API v1 routes aggregation"""

from fastapi import APIRouter

from .analytics.router import router as analytics_router

# Create v1 router
api_router = APIRouter()

api_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
