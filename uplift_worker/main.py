"""
Main application for the Cart Uplift learning worker
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from uplift_worker.api.v1 import cron_router, health_router, webhooks_router
from uplift_worker.core.config import settings
from uplift_worker.core.database import close_engine, require_healthy_engine
from uplift_worker.core.database.create_tables import create_all_tables
from uplift_worker.core.logging import get_logger
from uplift_worker.shared.helpers import now_utc

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await initialize_services()
    yield
    await cleanup_services()


async def initialize_services():
    """Fail fast when the database is unreachable, then make sure tables exist"""
    logger.info("Checking database connectivity...")
    try:
        engine = await require_healthy_engine()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        logger.error("Application startup failed - database is not available")
        raise

    logger.info("Database connection verified")
    await create_all_tables(engine)


async def cleanup_services():
    """Release database connections"""
    try:
        await close_engine()
    except Exception as e:
        logger.error(f"Failed to cleanup services: {e}")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Behavioral learning pipeline for cart upsell recommendations",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.include_router(cron_router)
app.include_router(webhooks_router)
app.include_router(health_router)


@app.get("/health")
async def health_check():
    """Liveness check"""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "timestamp": now_utc().isoformat(),
        "version": settings.VERSION,
    }


def run():
    uvicorn.run(
        "uplift_worker.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.logging.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
