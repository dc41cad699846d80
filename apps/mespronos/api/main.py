"""
MesPronos API Server

FastAPI server hosting the bet reminder worker and its admin endpoints.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging
import os
import uvicorn

from mespronos.api.routes import router
from mespronos.database import db
from mespronos.database.init_defaults import init_defaults
from mespronos.services.reminder_service import get_reminder_service
from mespronos.services import settings_service

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("Starting up MesPronos API...")

    # Initialize database (create tables if they don't exist)
    # Fallback for environments where migrations were not run
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    # Initialize default values (settings, etc.)
    try:
        await init_defaults()
        logger.info("✓ Default values initialized")
    except Exception as e:
        logger.error(f"Failed to initialize defaults: {e}", exc_info=True)

    # Start reminder worker
    try:
        reminder_service = get_reminder_service()
        reminder_service.start()
        logger.info("✓ Reminder worker started")
    except Exception as e:
        logger.error(f"Failed to start reminder worker: {e}", exc_info=True)

    yield  # App is running

    logger.info("Shutting down MesPronos API...")

    # Stop reminder worker
    try:
        reminder_service = get_reminder_service()
        reminder_service.stop()
        logger.info("✓ Reminder worker stopped")
    except Exception as e:
        logger.error(f"Error stopping reminder worker: {e}", exc_info=True)

    # Close Redis connection
    try:
        await settings_service.close_redis_connection()
        logger.info("✓ Redis connection closed")
    except Exception as e:
        logger.error(f"Error closing Redis connection: {e}", exc_info=True)


app = FastAPI(
    title="MesPronos API",
    description="Bet reminders for the MesPronos prediction site",
    version="1.0.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
