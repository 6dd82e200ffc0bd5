"""FastAPI dependency injection functions."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainstats.config import Settings, get_settings
from chainstats.db.engine import get_session
from chainstats.db.engine import get_session_factory as _engine_session_factory
from chainstats.services.cache import CacheCoordinator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    async for session in get_session():
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the factory used by computations that outlive a request."""
    return _engine_session_factory()


def get_app_settings() -> Settings:
    """Return application settings."""
    return get_settings()


def get_cache(request: Request) -> CacheCoordinator:
    """Return the application-wide cache coordinator."""
    return request.app.state.cache
