"""Convert list items into Sonarr custom-list entries in paced batches."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import ConfigurationError
from watchlist_bridge.models.content import ContentItem, ResolvedIdentifier
from watchlist_bridge.schema.lists import SonarrSeries
from watchlist_bridge.services.resolver import IdentifierResolver

logger = logging.getLogger("watchlist_bridge.services.converter")


class BatchConverter:
    """Resolve items a batch at a time and keep only the ones that resolve.

    Each batch runs up to ``batch_size`` resolutions concurrently and settles
    before the next starts. Misses and per-item errors drop the item;
    ConfigurationError is re-raised because every later item would fail too.
    """

    def __init__(
        self,
        resolver: IdentifierResolver,
        *,
        batch_size: int | None = None,
        delay_seconds: float | None = None,
    ) -> None:
        self.resolver = resolver
        self.batch_size = max(1, batch_size or settings.resolve_batch_size)
        self.delay_seconds = settings.resolve_batch_delay_seconds if delay_seconds is None else delay_seconds

    async def convert(self, items: Sequence[ContentItem]) -> list[SonarrSeries]:
        results: list[SonarrSeries] = []
        for start in range(0, len(items), self.batch_size):
            batch = items[start : start + self.batch_size]
            outcomes = await asyncio.gather(
                *(self.resolver.resolve(item.imdb_id) for item in batch),
                return_exceptions=True,
            )
            for item, outcome in zip(batch, outcomes):
                if isinstance(outcome, ConfigurationError):
                    raise outcome
                if isinstance(outcome, BaseException):
                    logger.error("Error processing %s: %s", item.imdb_id, outcome)
                    continue
                if outcome is not None:
                    results.append(_to_series(item, outcome))
            if start + self.batch_size < len(items) and self.delay_seconds > 0:
                await asyncio.sleep(self.delay_seconds)
        logger.info("Converted %d of %d items to Sonarr entries", len(results), len(items))
        return results


def _to_series(item: ContentItem, resolved: ResolvedIdentifier) -> SonarrSeries:
    return SonarrSeries(
        tvdb_id=resolved.tvdb_id,
        title=resolved.title or item.title,
        tmdb_id=resolved.tmdb_id or None,
        imdb_id=item.imdb_id,
    )
