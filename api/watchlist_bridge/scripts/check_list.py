"""Fetch a list and print what the extractor recovered from it."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import Counter

import httpx

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import InvalidReference, ListFetchError
from watchlist_bridge.ingestion.imdb import ListFetchOptions, PageAggregator, filter_tv_shows


async def _summarize(reference: str, options: ListFetchOptions) -> dict:
    result = await PageAggregator().collect_from(reference, options)
    tv_shows = filter_tv_shows(result.items)
    type_counts = Counter(item.content_type.value for item in result.items)
    return {
        "id": reference,
        "totalItems": len(result.items),
        "pagesFetched": result.pages_fetched,
        "partial": result.partial,
        "tvShowCount": len(tv_shows),
        "typeCounts": dict(type_counts),
        "tvTitles": [item.title for item in tv_shows],
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Debug list extraction for an IMDb watchlist or list")
    parser.add_argument("reference", nargs="?", default="ur12345678", help="ur…/ls… id or full IMDb URL")
    parser.add_argument("--single-page", action="store_true", help="Only fetch the first page")
    parser.add_argument("--max-items", type=int, default=None, help="Stop after this many items")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s [%(levelname)s] %(message)s")
    options = ListFetchOptions(fetch_all=not args.single_page, max_items=args.max_items)
    try:
        summary = asyncio.run(_summarize(args.reference, options))
    except (InvalidReference, ListFetchError, httpx.HTTPError) as exc:
        print(f"Error: {exc}")
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
