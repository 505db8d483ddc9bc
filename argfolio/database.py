# argfolio/database.py
"""
Database connection and session management.

The relational database is only used as the backing store of the
SqlDocumentStore: one table of JSON documents keyed by (collection, id).

- SQLite in-memory: StaticPool so every session shares one connection
- SQLite file: check_same_thread disabled for FastAPI's threadpool
- Anything else: default pool with pre-ping health checks
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

logger = logging.getLogger(__name__)


def _create_engine():
    """
    Create SQLAlchemy engine with environment-appropriate configuration.

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    if settings.is_memory_sqlite:
        logger.info("Configuring in-memory SQLite document store")
        return create_engine(
            settings.database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    if settings.is_sqlite:
        logger.info(f"Configuring SQLite document store at {settings.database_url}")
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info("Configuring database document store with pre-ping pool")
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.debug,
    )


# Create engine and session factory
engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the documents table if it does not exist."""
    from .models import Base

    Base.metadata.create_all(bind=engine)


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns:
        dict: Health status with backend info
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            conn.commit()

        return {
            "status": "healthy",
            "database": "sqlite" if settings.is_sqlite else engine.dialect.name,
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }
