"""
Application lifecycle event handlers.

Builds the application context, starts the aggregation scheduler and
closes the Cosmos DB client on shutdown.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from core.context import AppContext, create_cosmos_context
from db.cosmos_session import close_cosmos

logger = structlog.get_logger(__name__)


async def start_aggregation_scheduler(context: AppContext) -> None:
    """Start the scheduler at the configured update interval, if enabled."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Aggregation scheduler disabled by settings")
        return

    if not await context.batch_processor.is_processing_enabled():
        logger.info("Aggregation disabled in system settings; scheduler not started")
        return

    try:
        config = await context.config_service.get_config()
        interval = config.update_interval
    except Exception as e:
        logger.warning(f"Could not read update interval, using default: {e}")
        interval = settings.SCHEDULER_INTERVAL_SECONDS

    result = context.scheduler.start(interval)
    if result.success:
        logger.info("Aggregation scheduler started", interval=interval)
    else:
        logger.warning("Aggregation scheduler did not start", error=result.error)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info(f"Starting {settings.APP_NAME} API...")

        # Tests install their own context before the app starts
        context = getattr(app.state, "context", None)
        if context is None:
            context = create_cosmos_context()
            app.state.context = context
            logger.info("Application context initialized")

        try:
            await start_aggregation_scheduler(context)
        except Exception as e:
            logger.exception("Failed to start aggregation scheduler", error=str(e))
            logger.warning("Results will only refresh on manual aggregation runs")

        logger.info(f"{settings.APP_NAME} API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info(f"Shutting down {settings.APP_NAME} API...")

        context = getattr(app.state, "context", None)
        if context is not None:
            try:
                context.scheduler.shutdown()
                logger.info("Aggregation scheduler stopped")
            except Exception as e:
                logger.warning(f"Aggregation scheduler cleanup failed: {e}")

        await close_cosmos()

        logger.info(f"{settings.APP_NAME} API shutdown complete")

    return stop_app
