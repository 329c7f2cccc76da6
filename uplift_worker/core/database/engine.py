"""
SQLAlchemy async engine configuration for the Cart Uplift learning worker
"""

import asyncio
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool

from uplift_worker.core.config.settings import settings
from uplift_worker.core.exceptions import DatabaseConnectionError
from uplift_worker.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_engine_lock = asyncio.Lock()


def get_database_url(database_url: Optional[str] = None) -> str:
    """Get the database URL with proper async driver"""
    database_url = database_url or settings.database.DATABASE_URL

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return database_url


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create SQLAlchemy async engine"""
    database_url = get_database_url(database_url)

    engine_kwargs = {
        "url": database_url,
        "echo": settings.database.SQLALCHEMY_ECHO,
        "echo_pool": settings.database.SQLALCHEMY_ECHO_POOL,
        "poolclass": NullPool,
        "connect_args": (
            {
                "command_timeout": settings.database.DATABASE_QUERY_TIMEOUT,
                "server_settings": {"application_name": settings.SERVICE_NAME},
            }
            if "postgresql" in database_url
            else {}
        ),
    }

    engine = create_async_engine(**engine_kwargs)

    if "sqlite" in database_url:

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Set SQLite pragmas for local runs and tests"""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine


async def get_engine() -> AsyncEngine:
    """Get or create the shared async database engine"""
    global _engine

    if _engine is None:
        async with _engine_lock:
            if _engine is None:
                _engine = create_engine()
                logger.info("Database engine created", service=settings.SERVICE_NAME)

    return _engine


async def close_engine() -> None:
    """Dispose of the shared engine"""
    global _engine

    if _engine is not None:
        try:
            await _engine.dispose()
        finally:
            _engine = None


async def check_engine_health(engine: Optional[AsyncEngine] = None) -> bool:
    """Check if the database answers a trivial query"""
    try:
        engine = engine or await get_engine()
        async with engine.connect() as conn:
            await asyncio.wait_for(
                conn.execute(text("SELECT 1")),
                timeout=settings.DATABASE_CONNECT_TIMEOUT,
            )
        return True
    except Exception as e:
        logger.warning(f"Database engine health check failed: {e}")
        return False


async def require_healthy_engine() -> AsyncEngine:
    """Return the engine or raise when the database is unreachable"""
    engine = await get_engine()
    if not await check_engine_health(engine):
        raise DatabaseConnectionError(
            "Database is unreachable",
            connection_details={"url": get_database_url().split("@")[-1]},
        )
    return engine
