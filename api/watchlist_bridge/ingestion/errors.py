"""Exceptions raised by list ingestion and identifier resolution."""

from __future__ import annotations


class InvalidReference(ValueError):
    """Raised when a list reference is neither a known short code nor a site URL."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Invalid IMDb list ID or URL: {value}. "
            "Expected format: ur12345678, ls12345678, or full IMDb URL"
        )
        self.value = value


class ListFetchError(Exception):
    """Base class for failures fetching a list page."""


class NotFound(ListFetchError):
    """Raised when the upstream collection is absent or private."""


class UpstreamError(ListFetchError):
    """Raised for non-success upstream statuses other than 404."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        detail = f"HTTP error {status_code}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)
        self.status_code = status_code


class ConfigurationError(RuntimeError):
    """Raised when a required external-service credential is missing."""
