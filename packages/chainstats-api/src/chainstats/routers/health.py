"""Health check endpoint."""

from fastapi import APIRouter, Depends

from chainstats import __version__
from chainstats.dependencies import get_cache
from chainstats.services.cache import CacheCoordinator

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(cache: CacheCoordinator = Depends(get_cache)) -> dict:
    """Return API health status, version and number of cached aggregates."""
    return {
        "status": "ok",
        "version": __version__,
        "cached_keys": len(cache),
    }
