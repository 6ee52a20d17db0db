"""FastAPI application entrypoint, service description, and health reporting."""

import asyncio
import logging
from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from watchlist_bridge import __version__
from watchlist_bridge.api.deps import get_resolution_cache, get_tmdb_client, resolution_cache
from watchlist_bridge.api.router import api_router
from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.observability import source_monitor
from watchlist_bridge.ingestion.tmdb import TMDBClient
from watchlist_bridge.models.content import ResolvedIdentifier
from watchlist_bridge.services.resolution_cache import TTLCache

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

logger = logging.getLogger("watchlist_bridge.main")

app = FastAPI(title=settings.app_name, version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)

_sweeper: asyncio.Task | None = None


def _configure_logging() -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


@app.on_event("startup")
async def _start_cache_sweeper() -> None:
    """Configure logging and start evicting expired resolutions in the background."""
    global _sweeper
    _configure_logging()
    _sweeper = asyncio.create_task(resolution_cache.run_sweeper(settings.cache_check_period_seconds))
    status = "configured" if settings.tmdb_configured else "not configured (set TMDB_API_KEY)"
    logger.info("%s %s started; TMDB API %s", settings.app_name, __version__, status)


@app.on_event("shutdown")
async def _stop_cache_sweeper() -> None:
    global _sweeper
    if _sweeper is not None:
        _sweeper.cancel()
        _sweeper = None


def _base_url() -> str:
    return (settings.base_url or f"http://localhost:{settings.port}").rstrip("/") + settings.api_prefix


@app.get("/", tags=["internal"])
async def describe() -> dict[str, Any]:
    """Describe the service and its endpoints."""
    base = _base_url()
    return {
        "name": settings.app_name,
        "description": "Convert IMDb watchlists and lists to Sonarr-compatible custom list format",
        "version": __version__,
        "endpoints": {
            "watchlist": {
                "url": f"{base}/watchlist/{{userId}}",
                "description": "All items from an IMDb watchlist with normalized metadata",
                "example": f"{base}/watchlist/ur12345678",
            },
            "watchlistTV": {
                "url": f"{base}/watchlist/{{userId}}/tv",
                "description": "TV shows from a watchlist in Sonarr format (JSON array)",
                "example": f"{base}/watchlist/ur12345678/tv",
                "sonarrCompatible": True,
            },
            "list": {
                "url": f"{base}/list/{{listId}}",
                "description": "All items from an IMDb list with normalized metadata",
                "example": f"{base}/list/ls036390872",
            },
            "listTV": {
                "url": f"{base}/list/{{listId}}/tv",
                "description": "TV shows from an IMDb list in Sonarr format (JSON array)",
                "example": f"{base}/list/ls036390872/tv",
                "sonarrCompatible": True,
            },
        },
        "requirements": {
            "imdb": "Your IMDb watchlist must be set to PUBLIC",
            "tmdb": "TMDB_API_KEY environment variable must be set (free at themoviedb.org)",
        },
        "notes": {
            "pagination": {
                "fetchAll": "All pages are fetched and merged by default; fetchAll=false returns one page "
                f"({settings.list_page_size} items)",
                "maxItems": "maxItems=N caps the number of items fetched",
                "page": "page=N fetches a specific page (1-indexed, only with fetchAll=false)",
                "window": "limit=N&offset=N slice the final result set",
            },
        },
    }


@app.get("/health", tags=["internal"])
async def health(
    client: TMDBClient = Depends(get_tmdb_client),
    cache: TTLCache[ResolvedIdentifier] = Depends(get_resolution_cache),
) -> dict[str, Any]:
    """Report TMDB configuration, cache statistics, and upstream call metrics."""
    return {
        "status": "ok",
        "tmdbConfigured": client.configured,
        "cache": asdict(cache.stats()),
        "sources": await source_monitor.snapshot(),
    }
