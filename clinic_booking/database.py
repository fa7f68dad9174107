"""Database engine setup.

Production Pattern:
- One engine per store, created from a DATABASE_URL
- pool_pre_ping for server databases
- Shared single connection for in-memory SQLite (otherwise every
  connection would see its own empty database)
- Idempotent table creation
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from clinic_booking.database_models import Base


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        database_url.endswith(":memory:") or database_url.rstrip("/") == "sqlite:"
    )


def create_db_engine(database_url: str) -> Engine:
    """
    Create SQLAlchemy engine for the appointment store.

    Args:
        database_url: SQLAlchemy connection string,
            e.g. sqlite:///appointments.db or postgresql://user:pw@host/db

    Returns:
        Engine instance
    """
    if _is_memory_sqlite(database_url):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 15},
            pool_pre_ping=True,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,  # Connection acquisition timeout
    )


def init_database(engine: Engine):
    """
    Create the appointment tables and indexes.

    Safe to call multiple times (idempotent).
    """
    Base.metadata.create_all(engine)
