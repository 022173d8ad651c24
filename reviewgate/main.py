"""reviewgate - Application review and claim engine for moderated communities."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reviewgate.core.config import settings
from reviewgate.core.storage import database
from reviewgate.routers import (
    analytics_router,
    applications_router,
    guilds_router,
    lookup_router,
    modmail_router,
    review_router,
)
from reviewgate.services.modmail_cache import open_threads
from reviewgate.services.notify import get_notifier
from reviewgate.services.panic import panic_switch
from reviewgate.services.stale_monitor import stale_monitor

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await database.init_models()
    await open_threads.hydrate(database)
    await panic_switch.hydrate(database)

    notifier = get_notifier()
    if settings.stale_monitor_enabled:
        logger.info("Starting stale application monitor...")
        stale_monitor.configure(database, notifier)
        await stale_monitor.start()

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await stale_monitor.stop()
    await notifier.close()
    await database.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="reviewgate",
    description="Application review and claim engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(applications_router)
app.include_router(review_router)
app.include_router(lookup_router)
app.include_router(analytics_router)
app.include_router(modmail_router)
app.include_router(guilds_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "reviewgate",
        "modmail_cache_hydrated": open_threads.hydrated,
        "stale_monitor": stale_monitor.get_status(),
    }
