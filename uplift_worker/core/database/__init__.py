"""
Database module for the Cart Uplift learning worker

Uses SQLAlchemy async for all database operations.
"""

from .engine import (
    get_engine,
    create_engine,
    close_engine,
    check_engine_health,
    require_healthy_engine,
    get_database_url,
)

from .session import (
    SessionFactory,
    build_session_factory,
    get_session_factory,
    get_session_context,
    get_transaction_context,
    run_in_transaction,
)

__all__ = [
    "get_engine",
    "create_engine",
    "close_engine",
    "check_engine_health",
    "require_healthy_engine",
    "get_database_url",
    "SessionFactory",
    "build_session_factory",
    "get_session_factory",
    "get_session_context",
    "get_transaction_context",
    "run_in_transaction",
]
