from __future__ import annotations

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import NotFound, UpstreamError

BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class ExternalAPIError(Exception):
    pass


async def fetch_json(url: str, *, headers: dict[str, str] | None = None, params: dict | None = None) -> dict:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=1, max=8),
        retry=retry_if_exception_type((httpx.TransportError, ExternalAPIError)),
        reraise=True,
    ):
        with attempt:
            async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
                response = await client.get(url, headers=headers, params=params)
                if response.status_code >= 500:
                    raise ExternalAPIError(f"Server error {response.status_code}")
                response.raise_for_status()
                return response.json()
    raise ExternalAPIError("Unreachable")


async def fetch_page(url: str, *, referer: str | None = None) -> str:
    """Fetch one HTML page with browser-like headers.

    404 maps to NotFound and any other non-success status to UpstreamError.
    """
    headers = dict(BROWSER_HEADERS)
    headers["Referer"] = referer or f"{settings.imdb_base_url}/"
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds, follow_redirects=True) as client:
        response = await client.get(url, headers=headers)
    if response.status_code == 404:
        raise NotFound("Watchlist not found. Make sure the watchlist is public.")
    if not response.is_success:
        raise UpstreamError(response.status_code, response.reason_phrase)
    return response.text
