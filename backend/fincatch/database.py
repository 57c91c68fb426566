# backend/fincatch/database.py
"""
Database connection and session management for the coupon payment store.

This module configures SQLAlchemy with:
- Environment-aware settings (in-memory SQLite for tests, a local SQLite
  file in development, DATABASE_URL in production)
- A session factory shared by the coupon payment repository
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fincatch.config import settings
from fincatch.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        database_url: Connection string; settings.database_url when omitted

    Configuration varies by database type:
    - In-memory SQLite: StaticPool so every session sees the same database
    - Anything else: SQLAlchemy's default pool
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite://") and ":memory:" in url:
        logger.info("Configuring in-memory SQLite coupon store")
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info(f"Configuring coupon store at {url.split('@')[-1]}")
    return create_engine(url, pool_pre_ping=True, echo=settings.debug)


engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create the coupon payment tables if they do not exist."""
    Base.metadata.create_all(bind=bind or engine)

