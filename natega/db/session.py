"""SQLAlchemy async session setup for natega-search.

Provides:
- Base: DeclarativeBase for all ORM models
- engine: async engine configured from settings
- async_session_factory: session maker bound to engine
- get_async_session: FastAPI dependency with Unit-of-Work commit/rollback
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from natega.config.settings import get_settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


_settings = get_settings()

engine = build_engine(_settings.DATABASE_URL)

async_session_factory = build_session_factory(engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session with Unit-of-Work semantics.

    Repositories only call add()/flush()/execute().
    Commit happens once at the end of a successful request.
    Rollback happens on any exception.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
