"""Infer a ContentType from free-text metadata and structured type hints.

Implementation notes:
- Text rules are evaluated in order and the first match wins.
- Episode and season counts share one predicate so the duration rule cannot
  drift from the rules that precede it.
"""

from __future__ import annotations

import re
from typing import Callable

from watchlist_bridge.models.content import ContentType

_EPISODES_RE = re.compile(r"\d+\s*eps?\b|\bepisodes?\b", re.IGNORECASE)
_SEASONS_RE = re.compile(r"\bseasons?\b", re.IGNORECASE)
_DURATION_RE = re.compile(r"\d+h(\s*\d+m)?", re.IGNORECASE)

Rule = tuple[Callable[[str], bool], ContentType]


def _has_episodes(text: str) -> bool:
    return bool(_EPISODES_RE.search(text))


def _has_seasons(text: str) -> bool:
    return bool(_SEASONS_RE.search(text))


def _has_episodes_or_seasons(text: str) -> bool:
    return _has_episodes(text) or _has_seasons(text)


def _has_duration(text: str) -> bool:
    return bool(_DURATION_RE.search(text)) and not _has_episodes_or_seasons(text)


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(needle in text for needle in needles)


TEXT_RULES: tuple[Rule, ...] = (
    (_contains("tv series"), ContentType.SERIES),
    (_contains("tv mini series", "mini series", "mini-series"), ContentType.MINI_SERIES),
    (_contains("tv special"), ContentType.SPECIAL),
    (_contains("video"), ContentType.VIDEO),
    (_contains("short"), ContentType.SHORT),
    (_has_episodes, ContentType.SERIES),
    (_has_seasons, ContentType.SERIES),
    (_has_duration, ContentType.MOVIE),
)


def classify_text(metadata: str) -> ContentType:
    """Classify rendered metadata text such as "TV Series 2019-2023 3 seasons"."""
    normalized = " ".join(metadata.lower().split())
    for predicate, content_type in TEXT_RULES:
        if predicate(normalized):
            return content_type
    return ContentType.UNKNOWN


def classify_type_hint(hint: str | None) -> ContentType:
    """Classify an embedded title-type hint such as "tvMiniSeries" or "Feature Film"."""
    if not hint:
        return ContentType.UNKNOWN
    normalized = hint.lower()
    if "miniseries" in normalized or "mini series" in normalized or "mini-series" in normalized:
        return ContentType.MINI_SERIES
    if "series" in normalized:
        return ContentType.SERIES
    if "movie" in normalized or "feature" in normalized:
        return ContentType.MOVIE
    if "special" in normalized:
        return ContentType.SPECIAL
    if "video" in normalized:
        return ContentType.VIDEO
    if "short" in normalized:
        return ContentType.SHORT
    return ContentType.UNKNOWN


def classify_linked_data_type(schema_type: object) -> ContentType:
    """Classify a linked-data ``@type`` annotation (string or list of strings)."""
    if isinstance(schema_type, list):
        schema_type = " ".join(str(value) for value in schema_type)
    normalized = str(schema_type or "").lower()
    if "tvminiseries" in normalized:
        return ContentType.MINI_SERIES
    if "tvseries" in normalized:
        return ContentType.SERIES
    if "movie" in normalized:
        return ContentType.MOVIE
    return ContentType.UNKNOWN
