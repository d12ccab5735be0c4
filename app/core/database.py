import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True, echo=False)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, closed (and rolled back if uncommitted) afterwards."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """Create all tables."""
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Commit on success; on any error or cancellation roll back and re-raise."""
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
