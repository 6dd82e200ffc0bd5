"""Statistics endpoints — dashboard comparison and graph series."""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainstats.config import Settings
from chainstats.dependencies import get_app_settings, get_cache, get_db, get_session_factory
from chainstats.schemas.stats import (
    DashboardResponse,
    MetricSeriesResponse,
    ProviderLeasesResponse,
    ProviderSeriesResponse,
)
from chainstats.services.cache import CacheCoordinator
from chainstats.services.provider_stats import (
    get_provider_active_leases_series,
    get_provider_series,
)
from chainstats.services.stats import get_dashboard_data, get_series

router = APIRouter(prefix="/v1/stats", tags=["stats"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    at: datetime | None = None,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> DashboardResponse:
    """Latest network totals next to the values one window earlier.

    ``at`` pins "now" to the last processed block at or before that time.
    """
    data = await get_dashboard_data(db, at=at, window_hours=settings.comparison_window_hours)
    return DashboardResponse(**data)


@router.get("/graph/{metric}", response_model=MetricSeriesResponse)
async def get_graph_data(
    metric: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> MetricSeriesResponse:
    """Daily series for a block metric such as ``daily_uakt_spent``."""
    data = await get_series(db, metric, window_hours=settings.comparison_window_hours)
    return MetricSeriesResponse(**data)


@router.get("/providers/graph/{metric}", response_model=ProviderSeriesResponse)
async def get_provider_graph_data(
    metric: str,
    cache: CacheCoordinator = Depends(get_cache),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
) -> ProviderSeriesResponse:
    """Daily capacity of online providers (``count``, ``cpu``, ``gpu``, ``memory``, ``storage``)."""
    data = await get_provider_series(
        cache,
        session_factory,
        metric,
        ttl_seconds=settings.provider_stats_cache_ttl_seconds,
    )
    return ProviderSeriesResponse(**data)


@router.get("/providers/{address}/active-leases", response_model=ProviderLeasesResponse)
async def get_provider_active_leases(
    address: str,
    db: AsyncSession = Depends(get_db),
) -> ProviderLeasesResponse:
    """Daily count of leases active on one provider."""
    data = await get_provider_active_leases_series(db, address)
    return ProviderLeasesResponse(**data)
