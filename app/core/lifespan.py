"""Application lifespan.

Startup sets up logging, then tracing and instrumentation when enabled.
Shutdown flushes spans and disposes the database engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.telemetry import configure_tracing, instrument, shutdown_tracing

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging()
    if configure_tracing(settings) is not None:
        database.ensure_engine()
        instrument(app, database.engine)
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    shutdown_tracing()
    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
