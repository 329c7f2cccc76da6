"""
SQLAlchemy async session management for the Cart Uplift learning worker
"""

import asyncio
from typing import AsyncGenerator, Awaitable, Callable, Optional, Tuple, Type, TypeVar
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from uplift_worker.core.logging import get_logger
from .engine import get_engine

logger = get_logger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]
T = TypeVar("T")

_session_factory: Optional[SessionFactory] = None
_session_factory_lock = asyncio.Lock()


def build_session_factory(engine) -> SessionFactory:
    """Session factory bound to the given engine"""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Keep objects accessible after commit
        autoflush=True,
    )


async def get_session_factory() -> SessionFactory:
    """Get or create the async session factory"""
    global _session_factory

    if _session_factory is None:
        async with _session_factory_lock:
            if _session_factory is None:
                engine = await get_engine()
                _session_factory = build_session_factory(engine)

    return _session_factory


@asynccontextmanager
async def get_session_context(
    session_factory: Optional[SessionFactory] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Usage:
        async with get_session_context() as session:
            result = await session.execute(query)
    """
    factory = session_factory or await get_session_factory()
    session = factory()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {e}")
        await session.rollback()
        raise
    finally:
        await session.close()


@asynccontextmanager
async def get_transaction_context(
    session_factory: Optional[SessionFactory] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database transactions with automatic rollback on error.

    Usage:
        async with get_transaction_context() as session:
            # committed automatically when the block exits cleanly
            session.add(row)
    """
    factory = session_factory or await get_session_factory()
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception as e:
        logger.error(
            "Database transaction rolled back",
            error_type=type(e).__name__,
            error=str(e),
        )
        await session.rollback()
        raise
    finally:
        await session.close()


async def run_in_transaction(
    operation: Callable[[AsyncSession], Awaitable[T]],
    session_factory: Optional[SessionFactory] = None,
    attempts: int = 1,
    retry_on: Tuple[Type[Exception], ...] = (StaleDataError,),
) -> T:
    """
    Run operation(session) in its own transaction.

    When a concurrent writer invalidates what the operation read (a version
    mismatch on flush, or whatever else retry_on names) the transaction is
    rolled back and the operation runs again on a fresh session, up to
    `attempts` times in total.

    Usage:
        async def merge(session):
            ...

        await run_in_transaction(merge, attempts=3)
    """
    for attempt in range(1, attempts + 1):
        try:
            async with get_transaction_context(session_factory) as session:
                return await operation(session)
        except retry_on as e:
            if attempt >= attempts:
                raise
            logger.info(
                "Retrying transaction after a concurrent write",
                attempt=attempt,
                attempts=attempts,
                error_type=type(e).__name__,
            )
    raise ValueError("attempts must be at least 1")
