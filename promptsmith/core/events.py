"""
FastAPI lifespan event handlers.
Clean separation of application lifecycle events.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from promptsmith.core.startup import startup_orchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.
    Loads (or trains) the vagueness model on startup and releases shared
    enhancement services on shutdown.
    """
    # Startup sequence
    try:
        startup_success = await startup_orchestrator.startup()

        if not startup_success:
            logger.error("Application startup failed")
            raise RuntimeError("Failed to start application")

    except Exception as e:
        logger.error(f"Critical startup error: {e}", exc_info=True)
        raise

    # Application is running
    yield

    # Shutdown sequence
    try:
        await startup_orchestrator.shutdown()

    except Exception as e:
        logger.error(f"Shutdown error: {e}", exc_info=True)
