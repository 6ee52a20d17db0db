"""List ingestion: reference parsing, page extraction, and TMDB lookups."""

from __future__ import annotations

from watchlist_bridge.ingestion.imdb import ListFetchOptions, PageAggregator
from watchlist_bridge.ingestion.tmdb import TMDBClient

__all__ = ["ListFetchOptions", "PageAggregator", "TMDBClient"]
