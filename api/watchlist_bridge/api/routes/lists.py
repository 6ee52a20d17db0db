from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, TypeVar

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status

from watchlist_bridge.api.deps import get_aggregator, get_converter, get_tmdb_client
from watchlist_bridge.ingestion.errors import ConfigurationError, InvalidReference, NotFound, UpstreamError
from watchlist_bridge.ingestion.imdb import ListFetchOptions, PageAggregator, filter_tv_shows
from watchlist_bridge.ingestion.tmdb import TMDBClient
from watchlist_bridge.models.content import AggregatedList
from watchlist_bridge.schema.lists import (
    ContentItemOut,
    ItemsResponse,
    ListItemsResponse,
    PaginationOut,
    SonarrSeries,
    WatchlistItemsResponse,
)
from watchlist_bridge.services.converter import BatchConverter

logger = logging.getLogger("watchlist_bridge.api.lists")

router = APIRouter()

T = TypeVar("T")


@dataclass(slots=True)
class ResultWindow:
    limit: int | None
    offset: int

    def apply(self, items: Sequence[T]) -> list[T]:
        if self.limit:
            return list(items[self.offset : self.offset + self.limit])
        return list(items)


def list_options(
    fetch_all: bool = Query(default=True, alias="fetchAll"),
    max_items: int | None = Query(default=None, alias="maxItems", ge=1),
    page: int | None = Query(default=None, ge=1),
) -> ListFetchOptions:
    """Pagination controls; ``page`` only applies when ``fetchAll=false``."""
    return ListFetchOptions(fetch_all=fetch_all, max_items=max_items, page=None if fetch_all else page)


def result_window(
    limit: int | None = Query(default=None, ge=0),
    offset: int = Query(default=0, ge=0),
) -> ResultWindow:
    return ResultWindow(limit=limit, offset=offset)


async def _collect(aggregator: PageAggregator, reference: str, options: ListFetchOptions) -> AggregatedList:
    try:
        return await aggregator.collect_from(reference, options)
    except InvalidReference as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamError as exc:
        logger.error("Upstream error fetching %s: %s", reference, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.error("Transport error fetching %s: %s", reference, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to fetch list: {str(exc) or type(exc).__name__}"
        ) from exc


def _require_tmdb(client: TMDBClient) -> None:
    if not client.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="TMDB API key not configured. Set TMDB_API_KEY to enable Sonarr format with TVDB IDs.",
        )


def _items_response(
    model: type[ItemsResponse], result: AggregatedList, window: ResultWindow, **owner: str
) -> ItemsResponse:
    return model(
        **owner,
        total_items=len(result.items),
        offset=window.offset,
        limit=window.limit or None,
        partial=result.partial,
        pagination=PaginationOut.from_result(result),
        items=[ContentItemOut.from_item(item) for item in window.apply(result.items)],
    )


async def _sonarr_series(
    reference: str,
    aggregator: PageAggregator,
    converter: BatchConverter,
    client: TMDBClient,
    options: ListFetchOptions,
    window: ResultWindow,
) -> list[SonarrSeries]:
    _require_tmdb(client)
    result = await _collect(aggregator, reference, options)
    tv_shows = window.apply(filter_tv_shows(result.items))
    try:
        return await converter.convert(tv_shows)
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/watchlist/{user_id}", response_model=WatchlistItemsResponse, response_model_by_alias=True)
async def watchlist_items(
    user_id: str,
    options: ListFetchOptions = Depends(list_options),
    window: ResultWindow = Depends(result_window),
    aggregator: PageAggregator = Depends(get_aggregator),
) -> ItemsResponse:
    """All items of a public watchlist with their normalized metadata."""
    result = await _collect(aggregator, user_id, options)
    return _items_response(WatchlistItemsResponse, result, window, user_id=user_id)


@router.get(
    "/watchlist/{user_id}/tv",
    response_model=list[SonarrSeries],
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def watchlist_tv(
    user_id: str,
    options: ListFetchOptions = Depends(list_options),
    window: ResultWindow = Depends(result_window),
    aggregator: PageAggregator = Depends(get_aggregator),
    converter: BatchConverter = Depends(get_converter),
    client: TMDBClient = Depends(get_tmdb_client),
) -> list[SonarrSeries]:
    """TV shows of a watchlist as a bare Sonarr custom-list array."""
    return await _sonarr_series(user_id, aggregator, converter, client, options, window)


@router.get("/list/{list_id}", response_model=ListItemsResponse, response_model_by_alias=True)
async def list_items(
    list_id: str,
    options: ListFetchOptions = Depends(list_options),
    window: ResultWindow = Depends(result_window),
    aggregator: PageAggregator = Depends(get_aggregator),
) -> ItemsResponse:
    """All items of a public custom list with their normalized metadata."""
    result = await _collect(aggregator, list_id, options)
    return _items_response(ListItemsResponse, result, window, list_id=list_id)


@router.get(
    "/list/{list_id}/tv",
    response_model=list[SonarrSeries],
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def list_tv(
    list_id: str,
    options: ListFetchOptions = Depends(list_options),
    window: ResultWindow = Depends(result_window),
    aggregator: PageAggregator = Depends(get_aggregator),
    converter: BatchConverter = Depends(get_converter),
    client: TMDBClient = Depends(get_tmdb_client),
) -> list[SonarrSeries]:
    """TV shows of a custom list as a bare Sonarr custom-list array."""
    return await _sonarr_series(list_id, aggregator, converter, client, options, window)
