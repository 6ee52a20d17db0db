"""Recover list items from one IMDb list page.

Three passes write into one collection keyed by IMDb id, in order:

1. the embedded ``__NEXT_DATA__`` JSON blob (usually the richest source);
2. title anchors rendered in the markup;
3. ``application/ld+json`` ItemList blocks, used to enrich earlier passes.

Later passes only fill gaps. Malformed blocks are skipped, so a page never
raises; it yields whatever could be recovered.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Iterator, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from watchlist_bridge.ingestion.classifier import (
    classify_linked_data_type,
    classify_text,
    classify_type_hint,
)
from watchlist_bridge.models.content import IMDB_ID_RE, ContentItem, PageResult
from watchlist_bridge.utils.years import parse_year

logger = logging.getLogger("watchlist_bridge.ingestion.extractor")

JSONValue = Union[dict[str, "JSONValue"], list["JSONValue"], str, int, float, bool, None]
JSONObject = dict[str, JSONValue]

ITEM_TEST_ID = "list-page-mc-list-item"
ITEM_CONTAINER_CLASSES = frozenset({"ipc-metadata-list-summary-item", "lister-item"})
TITLE_ANCHOR_SELECTOR = 'a[href*="/title/tt"]'
SCOPED_ANCHOR_SELECTOR = f'[data-testid="{ITEM_TEST_ID}"] {TITLE_ANCHOR_SELECTOR}'
CONTAINER_TITLE_SELECTOR = ".ipc-title__text, .lister-item-header a"
LIST_TOTAL_SELECTOR = '[data-testid="list-page-mc-total-items"], [data-testid="list-page-metadata"], .lister-total-items'

_HREF_ID_RE = re.compile(r"/title/(tt\d+)")
_LIST_INDEX_RE = re.compile(r"^\d+\.?$")
_ORDINAL_PREFIX_RE = re.compile(r"^\d+\.\s*")
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_TITLE_COUNT_RE = re.compile(r"\b(\d{1,3}(?:,\d{3})+|\d+)\s+titles?\b", re.IGNORECASE)


class ItemCollection:
    """Insertion-ordered items keyed by IMDb id."""

    def __init__(self) -> None:
        self._items: dict[str, ContentItem] = {}

    def __contains__(self, imdb_id: object) -> bool:
        return imdb_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, imdb_id: str) -> ContentItem | None:
        return self._items.get(imdb_id)

    def upsert(self, item: ContentItem) -> bool:
        """Insert a new item or enrich the existing one; return True when new."""
        existing = self._items.get(item.imdb_id)
        if existing is None:
            self._items[item.imdb_id] = item
            return True
        existing.enrich(item)
        return False

    def items(self) -> list[ContentItem]:
        return list(self._items.values())


def extract_page(html: str) -> PageResult:
    """Run every extraction pass over a page and return the merged result."""
    soup = BeautifulSoup(html, "html.parser")
    collection = ItemCollection()
    blob = _load_data_blob(soup)
    if blob is not None:
        _collect_from_blob(blob, collection)
    blob_count = len(collection)
    _collect_from_anchors(soup, collection)
    anchor_count = len(collection) - blob_count
    _enrich_from_linked_data(soup, collection)
    logger.debug(
        "Parsed %d items (blob=%d anchors=%d linked_data=%d)",
        len(collection),
        blob_count,
        anchor_count,
        len(collection) - blob_count - anchor_count,
    )
    return PageResult(items=collection.items(), declared_total=_declared_total(soup, blob))


def extract_items(html: str) -> list[ContentItem]:
    return extract_page(html).items


# Pass 1: structured blob ---------------------------------------------------


def _load_data_blob(soup: BeautifulSoup) -> JSONValue:
    candidates = soup.find_all("script", id="__NEXT_DATA__") or soup.find_all(
        "script", attrs={"type": "application/json"}
    )
    for script in candidates:
        payload = _parse_json(script.get_text())
        if payload is not None:
            return payload
    return None


def _parse_json(raw: str) -> JSONValue:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed embedded JSON block")
        return None


def iter_objects(value: JSONValue) -> Iterator[JSONObject]:
    """Yield every object node of a JSON tree in document order."""
    stack: list[JSONValue] = [value]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            yield node
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))


def _nested_text(node: JSONObject, key: str, inner: str) -> str | None:
    value = node.get(key)
    if isinstance(value, dict):
        value = value.get(inner)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _read_primary_id(node: JSONObject) -> str | None:
    for key in ("id", "const"):
        value = node.get(key)
        if isinstance(value, str) and IMDB_ID_RE.fullmatch(value):
            return value
    return None


def _read_title(node: JSONObject) -> str | None:
    for key, inner in (("titleText", "text"), ("originalTitleText", "text"), ("title", "text"), ("name", "text")):
        title = _nested_text(node, key, inner)
        if title:
            return title
    return None


def _read_type_hint(node: JSONObject) -> str | None:
    return _nested_text(node, "titleType", "id") or _nested_text(node, "titleType", "text")


def _read_year(node: JSONObject) -> int | None:
    release_year = node.get("releaseYear")
    if isinstance(release_year, dict):
        year = parse_year(release_year.get("year"))
        if year is not None:
            return year
    year = parse_year(node.get("year"))
    if year is not None:
        return year
    release_date = node.get("releaseDate")
    if isinstance(release_date, dict):
        return parse_year(release_date.get("year"))
    return parse_year(release_date)


def _collect_from_blob(blob: JSONValue, collection: ItemCollection) -> None:
    for node in iter_objects(blob):
        imdb_id = _read_primary_id(node)
        if imdb_id is None or imdb_id in collection:
            continue
        title = _read_title(node)
        if not title:
            continue
        collection.upsert(
            ContentItem(
                imdb_id=imdb_id,
                title=title,
                content_type=classify_type_hint(_read_type_hint(node)),
                year=_read_year(node),
            )
        )


# Pass 2: markup anchors ----------------------------------------------------


def _enclosing_item(anchor: Tag) -> Tag | None:
    for parent in anchor.parents:
        if not isinstance(parent, Tag) or isinstance(parent, BeautifulSoup):
            continue
        if parent.get("data-testid") == ITEM_TEST_ID:
            return parent
        if ITEM_CONTAINER_CLASSES.intersection(parent.get("class") or []):
            return parent
    return None


def _anchor_title(anchor: Tag, container: Tag | None) -> str:
    title = anchor.get_text(" ", strip=True)
    if (not title or _LIST_INDEX_RE.match(title)) and container is not None:
        heading = container.select_one(CONTAINER_TITLE_SELECTOR)
        title = heading.get_text(" ", strip=True) if heading else ""
    title = _ORDINAL_PREFIX_RE.sub("", title)
    return title or "Unknown"


def _collect_from_anchors(soup: BeautifulSoup, collection: ItemCollection) -> None:
    anchors = soup.select(SCOPED_ANCHOR_SELECTOR) or soup.select(TITLE_ANCHOR_SELECTOR)
    seen: set[str] = set()
    for anchor in anchors:
        match = _HREF_ID_RE.search(str(anchor.get("href") or ""))
        if not match or match.group(1) in seen:
            continue
        imdb_id = match.group(1)
        seen.add(imdb_id)
        container = _enclosing_item(anchor)
        metadata = container.get_text(" ", strip=True) if container is not None else ""
        year_match = _YEAR_RE.search(metadata)
        collection.upsert(
            ContentItem(
                imdb_id=imdb_id,
                title=_anchor_title(anchor, container),
                content_type=classify_text(metadata),
                year=int(year_match.group(0)) if year_match else None,
            )
        )


# Pass 3: linked data -------------------------------------------------------


def _linked_data_lists(soup: BeautifulSoup) -> Iterator[JSONObject]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        payload = _parse_json(script.get_text())
        blocks = payload if isinstance(payload, list) else [payload]
        for block in blocks:
            if isinstance(block, dict) and block.get("@type") == "ItemList":
                yield block


def _enrich_from_linked_data(soup: BeautifulSoup, collection: ItemCollection) -> None:
    for block in _linked_data_lists(soup):
        entries = block.get("itemListElement")
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            item = entry.get("item")
            if not isinstance(item, dict):
                item = entry
            url = item.get("url") or entry.get("url")
            match = _HREF_ID_RE.search(url) if isinstance(url, str) else None
            if not match:
                continue
            name = item.get("name")
            collection.upsert(
                ContentItem(
                    imdb_id=match.group(1),
                    title=name.strip() if isinstance(name, str) and name.strip() else "Unknown",
                    content_type=classify_linked_data_type(item.get("@type")),
                    year=parse_year(item.get("datePublished")),
                )
            )


# Declared total ------------------------------------------------------------


def _declared_total(soup: BeautifulSoup, blob: JSONValue) -> int:
    """Best-effort item count the page reports for the whole list; 0 if unknown."""
    if blob is not None:
        for node in iter_objects(blob):
            total = node.get("total")
            if isinstance(node.get("edges"), list) and isinstance(total, int) and not isinstance(total, bool):
                return max(total, 0)
    # Header count only.
    for header in soup.select(LIST_TOTAL_SELECTOR):
        match = _TITLE_COUNT_RE.search(header.get_text(" ", strip=True))
        if match:
            return int(match.group(1).replace(",", ""))
    return 0
