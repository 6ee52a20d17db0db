from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import ConfigurationError
from watchlist_bridge.ingestion.http import ExternalAPIError, fetch_json
from watchlist_bridge.ingestion.observability import SourceMonitor, source_monitor
from watchlist_bridge.utils.redaction import redact_secrets

logger = logging.getLogger("watchlist_bridge.ingestion.tmdb")


@dataclass(frozen=True, slots=True)
class TMDBCandidate:
    """First TV match TMDB returns for an external id."""
    tmdb_id: int
    name: str


class TMDBClient:
    """Read-only TMDB lookups used to map IMDb ids onto TVDB ids.

    Non-success responses and transport failures are logged and reported as
    "no result"; only missing credentials raise.
    """
    source_name = "tmdb"

    def __init__(
        self,
        api_key: str | None = None,
        auth_token: str | None = None,
        *,
        base_url: str | None = None,
        monitor: SourceMonitor | None = None,
    ) -> None:
        self.api_key = api_key or settings.tmdb_api_key
        self.auth_token = auth_token or settings.tmdb_api_auth_header
        self.base_url = (base_url or settings.tmdb_api_base).rstrip("/")
        self.monitor = monitor or source_monitor

    @property
    def configured(self) -> bool:
        return bool(self.auth_token or self.api_key)

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        headers: dict[str, str] = {"accept": "application/json"}
        params: dict[str, str] = {}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        elif self.api_key:
            params["api_key"] = self.api_key
        else:
            raise ConfigurationError(
                "TMDB_API_KEY environment variable is not set. "
                "Get a free API key at https://www.themoviedb.org/settings/api"
            )
        return headers, params

    async def _get(self, operation: str, path: str, extra: dict[str, str] | None = None) -> dict[str, Any] | None:
        headers, params = self._auth()
        url = f"{self.base_url}{path}"
        try:
            return await self.monitor.track(
                self.source_name,
                operation,
                lambda: fetch_json(url, headers=headers, params={**params, **(extra or {})}),
                context={"path": path},
            )
        except (httpx.HTTPError, ExternalAPIError, ValueError) as exc:
            logger.error("TMDB %s request failed for %s: %s", operation, path, redact_secrets(str(exc)))
            return None

    async def find_by_imdb_id(self, imdb_id: str) -> TMDBCandidate | None:
        """Return the first TV result TMDB lists for an IMDb id."""
        payload = await self._get("find", f"/find/{imdb_id}", {"external_source": "imdb_id"})
        if not isinstance(payload, dict):
            return None
        tv_results = payload.get("tv_results")
        if not isinstance(tv_results, list) or not tv_results or not isinstance(tv_results[0], dict):
            return None
        show = tv_results[0]
        tmdb_id = show.get("id")
        if not isinstance(tmdb_id, int) or isinstance(tmdb_id, bool):
            return None
        name = show.get("name")
        return TMDBCandidate(tmdb_id=tmdb_id, name=name if isinstance(name, str) else "")

    async def get_tvdb_id(self, tmdb_id: int) -> int | None:
        """Return the TVDB id recorded for a TMDB TV show."""
        payload = await self._get("external_ids", f"/tv/{tmdb_id}/external_ids")
        if not isinstance(payload, dict):
            return None
        tvdb_id = payload.get("tvdb_id")
        if isinstance(tvdb_id, bool) or not isinstance(tvdb_id, int):
            return None
        return tvdb_id if tvdb_id > 0 else None
