"""Test fixtures and configuration."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from chainstats.dependencies import get_db, get_session_factory
from chainstats.main import create_app
from chainstats.models import Base, Block, Day, Lease, ProviderSnapshot

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite engine for tests."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with overridden DB dependencies."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.rollback()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_block(height: int, timestamp: datetime, **counters) -> Block:
    """Build a processed block; unspecified counters default to zero."""
    fields = {
        "is_processed": True,
        "total_lease_count": 0,
        "total_uakt_spent": 0,
        "active_lease_count": 0,
        "active_cpu": 0,
        "active_gpu": 0,
        "active_memory": 0,
        "active_ephemeral_storage": 0,
        "active_persistent_storage": 0,
    }
    fields.update(counters)
    return Block(height=height, timestamp=timestamp, **fields)


@pytest_asyncio.fixture
async def add_blocks(db_session: AsyncSession):
    """Return ``add(blocks)``, which commits the given blocks."""

    async def _add(blocks: list[Block]) -> list[Block]:
        db_session.add_all(blocks)
        await db_session.commit()
        return blocks

    return _add


@pytest_asyncio.fixture
async def seed_days(db_session: AsyncSession):
    """Return ``seed(counters_per_day)``: one closed day per entry.

    Day ``i`` closes with a block at ``T0 + i days`` of height ``100 * (i + 1)``
    carrying the given counters.
    """

    async def _seed(counters_per_day: list[dict]) -> list[Block]:
        blocks = []
        for index, counters in enumerate(counters_per_day):
            height = 100 * (index + 1)
            timestamp = T0 + timedelta(days=index)
            block = make_block(height, timestamp, **counters)
            day = Day(
                date=timestamp.date(),
                first_block_height=height - 99,
                last_block_height=height,
                last_block_height_yet=height,
            )
            db_session.add(day)
            blocks.append(block)
        db_session.add_all(blocks)
        await db_session.commit()
        return blocks

    return _seed


@pytest_asyncio.fixture
async def add_provider_snapshots(db_session: AsyncSession):
    """Return ``add(owner, check_date, is_online=True, **capacity)``."""

    async def _add(owner: str, check_date: datetime, is_online: bool = True, **capacity):
        snapshot = ProviderSnapshot(
            owner=owner, check_date=check_date, is_online=is_online, **capacity
        )
        db_session.add(snapshot)
        await db_session.commit()
        return snapshot

    return _add


@pytest_asyncio.fixture
async def add_leases(db_session: AsyncSession):
    """Return ``add(leases)`` taking dicts of Lease fields."""

    async def _add(leases: list[dict]) -> None:
        db_session.add_all([Lease(**lease) for lease in leases])
        await db_session.commit()

    return _add


@pytest.fixture
def t0() -> datetime:
    """Timestamp of the first seeded snapshot."""
    return T0


@pytest.fixture
def block():
    """Expose ``make_block`` to tests."""
    return make_block
