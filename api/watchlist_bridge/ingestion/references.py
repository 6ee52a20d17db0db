"""Parse user-supplied list references and build the page URLs they point at."""

from __future__ import annotations

import re

import httpx

from watchlist_bridge.core.config import settings
from watchlist_bridge.ingestion.errors import InvalidReference
from watchlist_bridge.models.content import ListReference, ReferenceKind

SITE_DOMAIN = "imdb.com"
_USER_RE = re.compile(r"^ur\d+$")
_LIST_RE = re.compile(r"^ls\d+$")


def _absolute_url(value: str) -> httpx.URL:
    if "://" not in value:
        value = f"https://{value.lstrip('/')}"
    return httpx.URL(value)


def _is_site_url(value: str) -> bool:
    if SITE_DOMAIN not in value.lower():
        return False
    try:
        host = _absolute_url(value).host.lower()
    except httpx.InvalidURL:
        return False
    return host == SITE_DOMAIN or host.endswith(f".{SITE_DOMAIN}")


def match_list_reference(value: str) -> ListReference | None:
    """Return the typed reference for a short code or site URL, or None."""
    candidate = value.strip()
    if _is_site_url(candidate):
        # Keep the whole URL so caller-supplied query parameters survive.
        return ListReference(ReferenceKind.URL, candidate)
    if _USER_RE.match(candidate):
        return ListReference(ReferenceKind.USER, candidate)
    if _LIST_RE.match(candidate):
        return ListReference(ReferenceKind.LIST, candidate)
    return None


def parse_list_reference(value: str) -> ListReference:
    """Parse a reference or raise InvalidReference."""
    reference = match_list_reference(value)
    if reference is None:
        raise InvalidReference(value)
    return reference


def requested_page(reference: ListReference) -> int | None:
    """Return the page number embedded in a URL reference, if any."""
    if reference.kind is not ReferenceKind.URL:
        return None
    raw = _absolute_url(reference.value).params.get("page")
    if raw and raw.isdigit() and int(raw) >= 1:
        return int(raw)
    return None


def build_list_url(reference: ListReference, page: int | None = None, *, base_url: str | None = None) -> str:
    """Build the fetch URL for a reference, optionally pinned to a page."""
    base = (base_url or settings.imdb_base_url).rstrip("/")
    if reference.kind is ReferenceKind.USER:
        # Detail view renders full metadata server-side.
        url = httpx.URL(f"{base}/user/{reference.value}/watchlist", params={"view": "detail"})
    elif reference.kind is ReferenceKind.LIST:
        url = httpx.URL(f"{base}/list/{reference.value}/", params={"view": "detail"})
    else:
        url = _absolute_url(reference.value)
    if page is not None:
        url = url.copy_set_param("page", str(page))
    return str(url)
