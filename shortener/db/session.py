"""
Database session management using SQLModel on the SQLAlchemy async engine.
Provides session factory and dependency injection for FastAPI routes.
"""

from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from shortener.core.config import settings
from shortener.core.logging import get_logger

# Register tables on the shared metadata
from shortener.models import url as _url_models  # noqa: F401
from shortener.models import user as _user_models  # noqa: F401

logger = get_logger(__name__)

# Create database engine with appropriate settings
if settings.is_sqlite:
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},
    )
else:
    # pool_pre_ping ensures connections are alive before using them
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session for FastAPI routes.
    Commits on success and rolls back on exceptions.

    Yields:
        Database session instance
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _ensure_sqlite_directory(database_url: str) -> None:
    database = make_url(database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


async def init_db() -> None:
    """Create database tables if they do not exist."""
    if settings.is_sqlite:
        _ensure_sqlite_directory(settings.DATABASE_URL)

    logger.info("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
