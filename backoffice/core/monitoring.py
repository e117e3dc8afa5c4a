# Back-office monitoring: Prometheus metrics and system health probes

import functools
import inspect
import logging
import time
from datetime import datetime, timezone
from typing import Dict, Any
import psutil
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import FastAPI, Request
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# Metrics
request_count = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
request_duration = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])

# Report metrics
report_duration = Histogram('analytics_report_duration_seconds', 'Analytics report build duration', ['report'])
report_records = Counter('analytics_records_folded_total', 'Records folded into analytics reports', ['report'])


def setup_monitoring_middleware(app: FastAPI):
    """Add monitoring middleware to track metrics"""

    @app.middleware("http")
    async def monitor_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time

        # Label by route template so path parameters do not explode cardinality
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        request_count.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code
        ).inc()

        request_duration.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(process_time)

        return response


def get_system_metrics() -> Dict[str, Any]:
    """Collect system-level metrics"""
    return {
        "cpu_percent": psutil.cpu_percent(),
        "memory_percent": psutil.virtual_memory().percent,
        "disk_percent": psutil.disk_usage('/').percent
    }


async def get_health_status(db_session: AsyncSession) -> Dict[str, Any]:
    """Get health status of the API and its database"""

    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {}
    }

    start = time.time()
    try:
        await db_session.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.time() - start) * 1000, 2)
        }
    except Exception as e:
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "unhealthy"

    health_status["metrics"] = get_system_metrics()
    return health_status


def track_report(name: str):
    """Time an async report builder and log its parameters"""
    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with report_duration.labels(report=name).time():
                result = await func(*args, **kwargs)
            # Only explicitly passed arguments, positional or keyword
            arguments = signature.bind(*args, **kwargs).arguments
            params = ", ".join(
                f"{key}={value}" for key, value in arguments.items()
                if key not in ("self", "now")
            )
            logger.info(f"Built {name} report ({params or 'defaults'})")
            return result
        return wrapper
    return decorator
