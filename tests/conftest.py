"""Shared pytest fixtures for the natega-search test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: session inside an outer transaction that rolls back at teardown
- client: AsyncClient with dependency overrides for DB-backed testing
- make_record: StudentRecord factory
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from natega.db.session import Base, get_async_session
import natega.db.tables  # noqa: F401 — register ORM models on Base.metadata
from natega.models.student import StudentRecord


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a session joined to an outer transaction.

    The outer transaction is never committed — it rolls back at teardown.
    The session joins it instead of owning it, so nothing it writes can
    outlive the test.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from natega.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_record():
    """Build a StudentRecord with a generated seating number."""
    counter = iter(range(1, 1_000_000))

    def _make(name: str, seating_no: str | None = None, score: float = 300.0) -> StudentRecord:
        return StudentRecord(
            seating_number=seating_no or f"{next(counter):06d}",
            display_name=name,
            total_score=score,
        )

    return _make
