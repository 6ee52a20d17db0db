from fastapi import Depends

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.imdb import PageAggregator
from watchlist_bridge.ingestion.tmdb import TMDBClient
from watchlist_bridge.models.content import ResolvedIdentifier
from watchlist_bridge.services.converter import BatchConverter
from watchlist_bridge.services.resolution_cache import TTLCache
from watchlist_bridge.services.resolver import IdentifierResolver

resolution_cache: TTLCache[ResolvedIdentifier] = TTLCache(settings.cache_ttl_seconds)


def get_resolution_cache() -> TTLCache[ResolvedIdentifier]:
    return resolution_cache


def get_aggregator() -> PageAggregator:
    return PageAggregator()


def get_tmdb_client() -> TMDBClient:
    return TMDBClient()


def get_converter(
    client: TMDBClient = Depends(get_tmdb_client),
    cache: TTLCache[ResolvedIdentifier] = Depends(get_resolution_cache),
) -> BatchConverter:
    return BatchConverter(IdentifierResolver(client, cache))
