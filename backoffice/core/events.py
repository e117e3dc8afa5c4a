"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .database import init_db, close_db
from .logging import setup_logging
from .config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    try:
        setup_logging()
        logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

        if settings.ENVIRONMENT != "test":
            await init_db()
            logger.info("Database initialized")

        logger.info(f"Reporting timezone: {settings.ANALYTICS_TIMEZONE}")
        logger.info(f"{settings.APP_NAME} started successfully")

        yield

    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await close_db()
        logger.info(f"{settings.APP_NAME} shutdown complete")
