"""
Schema bootstrap for the learning tables
"""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from uplift_worker.core.database.engine import get_engine
from uplift_worker.core.database.models import Base
from uplift_worker.core.exceptions import DatabaseError
from uplift_worker.core.logging import get_logger

logger = get_logger(__name__)


async def create_all_tables(engine: Optional[AsyncEngine] = None) -> List[str]:
    """
    Create every learning table that does not exist yet.

    Returns:
        Names of the tables defined by the models

    Raises:
        DatabaseError: when the DDL fails
    """
    engine = engine or await get_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logger.error(f"Failed to create tables: {e}")
        raise DatabaseError("Failed to create learning tables", cause=e) from e

    tables = sorted(Base.metadata.tables)
    logger.info("Learning tables verified", tables=len(tables))
    return tables
