"""Health check and monitoring endpoints"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any
from datetime import datetime, timezone
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from backoffice.core.config import settings
from backoffice.core.database import get_db
from backoffice.core.monitoring import get_health_status

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/health/detailed")
async def detailed_health_check(
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """Detailed health check with component status"""
    return await get_health_status(db)


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus exposition"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
