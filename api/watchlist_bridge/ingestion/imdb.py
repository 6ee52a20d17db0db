"""Walk the pages of an IMDb watchlist or list and merge their items."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

import httpx

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import ListFetchError
from watchlist_bridge.ingestion.extractor import ItemCollection, extract_page
from watchlist_bridge.ingestion.http import fetch_page
from watchlist_bridge.ingestion.observability import SourceMonitor, source_monitor
from watchlist_bridge.ingestion.references import build_list_url, parse_list_reference, requested_page
from watchlist_bridge.models.content import (
    TV_CONTENT_TYPES,
    AggregatedList,
    ContentItem,
    ContentType,
    ListReference,
    PageResult,
)

logger = logging.getLogger("watchlist_bridge.ingestion.imdb")

PageFetcher = Callable[[str], Awaitable[str]]


@dataclass(slots=True)
class ListFetchOptions:
    """Caller controls for a list aggregation."""
    fetch_all: bool = True
    max_items: int | None = None
    page: int | None = None


class PageAggregator:
    """Fetch list pages sequentially and merge them into one deduplicated list.

    Implementation notes:
    - Page 1 failures propagate; later page failures end the walk and flag the
      result as partial.
    - A page that adds no new ids is treated as the end of the data.
    - When a page does not report its total, walking continues while pages
      come back full, up to ``max_pages``.
    """

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        *,
        page_size: int | None = None,
        max_pages: int | None = None,
        delay_seconds: float | None = None,
        base_url: str | None = None,
        monitor: SourceMonitor | None = None,
    ) -> None:
        self._fetcher = fetcher or fetch_page
        self.page_size = page_size or settings.list_page_size
        self.max_pages = max_pages or settings.list_max_pages
        self.delay_seconds = settings.page_fetch_delay_seconds if delay_seconds is None else delay_seconds
        self.base_url = base_url
        self.monitor = monitor or source_monitor

    async def fetch_page(self, reference: ListReference, page: int) -> PageResult:
        url = build_list_url(reference, page, base_url=self.base_url)
        logger.info("Fetching list page %d from %s", page, url)
        html = await self.monitor.track(
            "imdb",
            "fetch_page",
            lambda: self._fetcher(url),
            context={"reference": reference.value, "page": page},
        )
        return extract_page(html)

    async def collect(self, reference: ListReference, options: ListFetchOptions | None = None) -> AggregatedList:
        options = options or ListFetchOptions()
        cap = options.max_items if options.max_items and options.max_items > 0 else None
        if not options.fetch_all and options.page:
            start_page = options.page
        else:
            start_page = requested_page(reference) or 1

        first = await self.fetch_page(reference, start_page)
        collection = ItemCollection()
        for item in first.items:
            collection.upsert(item)
        total_pages = self._total_pages(first, start_page)

        if not options.fetch_all or total_pages <= start_page and not self._walk_unknown(first):
            return AggregatedList(
                items=_capped(collection.items(), cap),
                page=start_page,
                total_pages=total_pages,
                has_more=start_page < total_pages or self._walk_unknown(first),
                pages_fetched=1,
            )

        last_page = total_pages if first.declared_total else self.max_pages
        page = start_page
        pages_fetched = 1
        partial = False
        while page < last_page:
            if cap is not None and len(collection) >= cap:
                break
            page += 1
            await self._pause()
            try:
                result = await self.fetch_page(reference, page)
            except (ListFetchError, httpx.HTTPError) as exc:
                logger.warning("Stopping at page %d after fetch failure: %s", page, exc)
                partial = True
                break
            pages_fetched += 1
            added = sum(1 for item in result.items if collection.upsert(item))
            if added == 0:
                logger.info("Page %d added no new items; treating as end of list", page)
                break
            if not first.declared_total and len(result.items) < self.page_size:
                break

        items = collection.items()
        capped = cap is not None and len(items) >= cap
        logger.info("Aggregated %d items across %d page(s)", min(len(items), cap or len(items)), pages_fetched)
        return AggregatedList(
            items=_capped(items, cap),
            page=start_page,
            total_pages=max(total_pages, page),
            has_more=partial or (capped and page < last_page),
            pages_fetched=pages_fetched,
            partial=partial,
        )

    async def collect_from(self, value: str, options: ListFetchOptions | None = None) -> AggregatedList:
        """Parse a user-supplied reference and aggregate it."""
        return await self.collect(parse_list_reference(value), options)

    def _total_pages(self, first: PageResult, start_page: int) -> int:
        effective_total = first.declared_total or (start_page - 1) * self.page_size + len(first.items)
        return max(1, math.ceil(effective_total / self.page_size))

    def _walk_unknown(self, first: PageResult) -> bool:
        return not first.declared_total and len(first.items) >= self.page_size

    async def _pause(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)


def _capped(items: list[ContentItem], cap: int | None) -> list[ContentItem]:
    return items[:cap] if cap is not None else items


def filter_tv_shows(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Keep only series and mini-series."""
    return [item for item in items if item.content_type in TV_CONTENT_TYPES]


def filter_potential_tv_shows(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Keep series, mini-series, and items whose type could not be determined."""
    return [
        item
        for item in items
        if item.content_type in TV_CONTENT_TYPES or item.content_type is ContentType.UNKNOWN
    ]


def filter_movies(items: Iterable[ContentItem]) -> list[ContentItem]:
    return [item for item in items if item.content_type is ContentType.MOVIE]
