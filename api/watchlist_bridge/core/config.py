"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["*"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Watchlist Bridge"
    environment: str = "development"
    api_prefix: str = ""
    base_url: Optional[str] = None
    port: int = 3000

    tmdb_api_key: Optional[str] = None
    tmdb_api_auth_header: Optional[str] = None
    tmdb_api_base: str = "https://api.themoviedb.org/3"
    imdb_base_url: str = "https://www.imdb.com"
    request_timeout_seconds: float = 15.0

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())

    cache_ttl_seconds: int = 60 * 60 * 24
    cache_check_period_seconds: int = 60 * 60
    list_page_size: int = 250
    list_max_pages: int = 40
    page_fetch_delay_seconds: float = 0.5
    resolve_batch_size: int = 5
    resolve_batch_delay_seconds: float = 0.25

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        if isinstance(value, list):
            cleaned = [origin.strip() for origin in value if isinstance(origin, str) and origin.strip()]
            return cleaned or DEFAULT_CORS_ORIGINS.copy()
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return DEFAULT_CORS_ORIGINS.copy()
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                cleaned = [str(origin).strip() for origin in parsed if str(origin).strip()]
                if cleaned:
                    return cleaned
            origins = [origin.strip() for origin in stripped.split(",") if origin.strip()]
            if origins:
                return origins
        return DEFAULT_CORS_ORIGINS.copy()

    @property
    def tmdb_configured(self) -> bool:
        """Return True when either TMDB credential is present."""
        return bool(self.tmdb_api_auth_header or self.tmdb_api_key)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
