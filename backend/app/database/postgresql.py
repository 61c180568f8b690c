"""
Relational store for documents, versions, segments, translations, approvals
and audit events. PostgreSQL via asyncpg in deployment; any SQLAlchemy async
URL works (the tests run on aiosqlite).
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.core.errors import PersistenceFailure
from app.core.logging import get_logger

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    # SQLite drivers manage their own single-connection pool
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Request-scoped session. Commits when the endpoint returns cleanly."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Request transaction failed", extra={"event": "db_commit_failed", "error": str(e)})
            raise PersistenceFailure("Failed to save changes") from e
        except Exception:
            await session.rollback()
            raise
