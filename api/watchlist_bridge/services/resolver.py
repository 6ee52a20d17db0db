"""Resolve IMDb ids to TVDB ids through TMDB, memoized in a TTL cache."""

from __future__ import annotations

import logging

from watchlist_bridge.ingestion.tmdb import TMDBClient
from watchlist_bridge.models.content import ResolvedIdentifier
from watchlist_bridge.services.resolution_cache import TTLCache

logger = logging.getLogger("watchlist_bridge.services.resolver")


class IdentifierResolver:
    """Two-step TMDB lookup (find, then external ids) with a shared cache.

    Implementation notes:
    - Only successful resolutions are cached; misses retry on every call.
    - Concurrent lookups for the same id are not coalesced.
    """

    def __init__(self, client: TMDBClient, cache: TTLCache[ResolvedIdentifier]) -> None:
        self.client = client
        self.cache = cache

    async def resolve(self, imdb_id: str) -> ResolvedIdentifier | None:
        cached = self.cache.get(imdb_id)
        if cached is not None:
            logger.debug("Cache hit for %s: TVDB %s", imdb_id, cached.tvdb_id)
            return cached

        logger.info("Resolving %s to a TVDB id", imdb_id)
        candidate = await self.client.find_by_imdb_id(imdb_id)
        if candidate is None:
            logger.info("No TV show found for %s", imdb_id)
            return None

        tvdb_id = await self.client.get_tvdb_id(candidate.tmdb_id)
        if tvdb_id is None:
            logger.info("No TVDB id found for %s (TMDB %s)", imdb_id, candidate.tmdb_id)
            return None

        resolved = ResolvedIdentifier(tvdb_id=tvdb_id, title=candidate.name, tmdb_id=candidate.tmdb_id)
        self.cache.set(imdb_id, resolved)
        logger.info("Resolved %s -> TVDB %s", imdb_id, tvdb_id)
        return resolved
