"""
Database Connection Module
Handles the SQL store connection using the SQLAlchemy async engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from restaurant_backend.core.config import get_settings
from restaurant_backend.errors import StoreError

logger = logging.getLogger(__name__)
settings = get_settings()

DATABASE_URL = settings.database_url

# SQLite (used by the test suite) does not take pool sizing arguments
engine_options = {"echo": settings.db_echo}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(
        pool_size=5,  # Connection pool size
        max_overflow=10,  # Extra connections when pool is full
        pool_pre_ping=True,
    )

engine = create_async_engine(DATABASE_URL, **engine_options)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


# Base class for all our models
class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def store_operation(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """
    Wrap one store operation.

    Any SQLAlchemy failure inside the block rolls the session back, is logged
    with its traceback and re-raised as StoreError with a message that does
    not leak driver details.

    Example:
        >>> async with store_operation(db, "load products"):
        ...     result = await db.execute(select(Product))
    """
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Store failure while trying to {action}: {e}")
        raise StoreError(f"Could not {action}") from e


async def init_db():
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register the mapped classes on Base.metadata
    import restaurant_backend.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
