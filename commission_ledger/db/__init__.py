"""Database session helpers."""

from commission_ledger.db.session import (
    AsyncSessionLocal,
    build_engine,
    build_session_factory,
    engine,
    get_db,
    get_db_context,
)

__all__ = [
    "AsyncSessionLocal",
    "build_engine",
    "build_session_factory",
    "engine",
    "get_db",
    "get_db_context",
]
