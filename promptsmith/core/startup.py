"""
Application startup orchestration.
Coordinates the initialization of various application components.
"""

import logging

from promptsmith.api.routes.enhancement import dispose_enhancement_service, get_enhancement_service
from promptsmith.config import settings
from promptsmith.services.prompt_enhancement.errors import ModelImportError

logger = logging.getLogger(__name__)


class StartupOrchestrator:
    """
    Orchestrates application startup sequence.
    """

    def __init__(self):
        self._is_started = False

    async def startup(self) -> bool:
        """
        Load the vagueness model and mark the application started.

        Returns:
            bool: True if startup succeeded
        """
        if self._is_started:
            logger.warning("Application already started")
            return True

        logger.info("Starting Promptsmith server")
        logger.info("Server Configuration:")
        logger.info(f"   - Host: {settings.HOST}:{settings.PORT}")
        logger.info(f"   - Debug Mode: {settings.DEBUG}")
        logger.info(f"   - Log Level: {settings.LOG_LEVEL}")
        logger.info(f"   - Vagueness Threshold: {settings.VAGUENESS_THRESHOLD}")
        logger.info(f"   - Workspace: {settings.WORKSPACE_ROOT or 'none'}")

        try:
            service = get_enhancement_service()
            service.load_persisted_model()
        except ModelImportError as e:
            # A corrupt model file should not keep the server down
            logger.error(f"Stored vagueness model rejected, using rule-based scoring: {e}")
        except Exception as e:
            logger.error(f"Startup failed during enhancement service initialization: {e}", exc_info=True)
            return False

        self._is_started = True
        logger.info("Promptsmith server started successfully")
        logger.info(f"API Documentation: http://{settings.HOST}:{settings.PORT}/docs")

        return True

    async def shutdown(self) -> bool:
        """
        Release the enhancement service.

        Returns:
            bool: True once shutdown completed
        """
        if not self._is_started:
            logger.info("Application not started, skipping shutdown")
            return True

        logger.info("Shutting down Promptsmith server...")

        try:
            dispose_enhancement_service()
        except Exception as e:
            logger.error(f"Enhancement service cleanup failed: {e}", exc_info=True)

        self._is_started = False
        logger.info("Server shutdown completed")

        return True

    @property
    def is_started(self) -> bool:
        """Check if application is started."""
        return self._is_started


# Global startup orchestrator instance
startup_orchestrator = StartupOrchestrator()
