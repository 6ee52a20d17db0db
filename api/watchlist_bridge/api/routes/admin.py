from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from watchlist_bridge.api.deps import get_resolution_cache
from watchlist_bridge.models.content import ResolvedIdentifier
from watchlist_bridge.services.resolution_cache import TTLCache

router = APIRouter()


@router.post("/cache/clear")
async def clear_cache(cache: TTLCache[ResolvedIdentifier] = Depends(get_resolution_cache)) -> dict:
    """Flush every resolved identifier so the next conversion hits TMDB again."""
    cache.flush()
    return {"message": "Cache cleared", "stats": asdict(cache.stats())}
