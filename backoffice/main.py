"""
Main FastAPI application
"""

from fastapi import FastAPI

from backoffice.core.config import settings
from backoffice.core.events import lifespan
from backoffice.core.exceptions import BackOfficeException, backoffice_exception_handler
from backoffice.core.middleware import setup_middleware
from backoffice.core.monitoring import setup_monitoring_middleware
from backoffice.api import api_router, health_router

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Back-office analytics: sales, profit, stock and trend reports",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)
if settings.PROMETHEUS_ENABLED:
    setup_monitoring_middleware(app)

app.add_exception_handler(BackOfficeException, backoffice_exception_handler)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backoffice.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
