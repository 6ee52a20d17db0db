"""Shared pytest fixtures for list pages, TMDB stubs, and the API client."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from watchlist_bridge.api import deps
from watchlist_bridge.main import app
from watchlist_bridge.models.content import ResolvedIdentifier
from watchlist_bridge.services.resolution_cache import TTLCache


def _title_node(imdb_id: str, title: str, type_id: str = "tvSeries", year: int | None = 2020) -> dict[str, Any]:
    node: dict[str, Any] = {
        "id": imdb_id,
        "titleText": {"text": title},
        "titleType": {"id": type_id, "text": type_id},
    }
    if year is not None:
        node["releaseYear"] = {"year": year, "endYear": None}
    return node


def _next_data_page(nodes: list[dict[str, Any]], *, total: int | None = None, extra_html: str = "") -> str:
    search: dict[str, Any] = {"edges": [{"listItem": node} for node in nodes]}
    if total is not None:
        search["total"] = total
    blob = {"props": {"pageProps": {"mainColumnData": {"list": {"titleListItemSearch": search}}}}}
    return (
        "<html><head>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(blob)}</script>'
        f"</head><body>{extra_html}</body></html>"
    )


@pytest.fixture
def title_node() -> Callable[..., dict[str, Any]]:
    return _title_node


@pytest.fixture
def next_data_page() -> Callable[..., str]:
    return _next_data_page


class TMDBStub:
    """Route-based replacement for ``fetch_json`` that records every call."""

    def __init__(self) -> None:
        self.find_results: dict[str, list[dict[str, Any]]] = {}
        self.tvdb_ids: dict[int, int | None] = {}
        self.calls: list[str] = []

    def add_show(self, imdb_id: str, tmdb_id: int, name: str, tvdb_id: int | None) -> None:
        self.find_results[imdb_id] = [{"id": tmdb_id, "name": name, "first_air_date": "2020-01-01"}]
        self.tvdb_ids[tmdb_id] = tvdb_id

    async def __call__(self, url: str, *, headers: dict[str, str] | None = None, params: dict | None = None) -> dict:
        self.calls.append(url)
        path = httpx.URL(url).path
        if "/find/" in path:
            imdb_id = path.rsplit("/", 1)[-1]
            return {"tv_results": self.find_results.get(imdb_id, []), "movie_results": []}
        if path.endswith("/external_ids"):
            tmdb_id = int(path.split("/")[-2])
            if tmdb_id not in self.tvdb_ids:
                request = httpx.Request("GET", url)
                raise httpx.HTTPStatusError(
                    "Not Found", request=request, response=httpx.Response(404, request=request)
                )
            return {"id": tmdb_id, "imdb_id": None, "tvdb_id": self.tvdb_ids[tmdb_id]}
        raise AssertionError(f"Unexpected TMDB call: {url}")


@pytest.fixture
def tmdb_stub(monkeypatch: pytest.MonkeyPatch) -> TMDBStub:
    stub = TMDBStub()
    monkeypatch.setattr("watchlist_bridge.ingestion.tmdb.fetch_json", stub)
    return stub


@pytest.fixture
def resolution_cache() -> TTLCache[ResolvedIdentifier]:
    return TTLCache(ttl_seconds=60)


@pytest_asyncio.fixture()
async def client(resolution_cache: TTLCache[ResolvedIdentifier]) -> AsyncClient:
    app.dependency_overrides[deps.get_resolution_cache] = lambda: resolution_cache
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.clear()
