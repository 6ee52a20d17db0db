"""Normalized list, item, and resolution records shared across the pipeline."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

IMDB_ID_RE = re.compile(r"tt\d+")


class ContentType(str, enum.Enum):
    """Closed set of content categories recognized on list pages."""
    MOVIE = "movie"
    SERIES = "tvSeries"
    MINI_SERIES = "tvMiniSeries"
    SPECIAL = "tvSpecial"
    VIDEO = "video"
    SHORT = "short"
    UNKNOWN = "unknown"

    @property
    def is_concrete(self) -> bool:
        return self is not ContentType.UNKNOWN


TV_CONTENT_TYPES = frozenset({ContentType.SERIES, ContentType.MINI_SERIES})


class ReferenceKind(str, enum.Enum):
    """Kinds of remote collections a reference can point at."""
    USER = "user"
    LIST = "list"
    URL = "url"


@dataclass(frozen=True, slots=True)
class ListReference:
    """Typed pointer to a remote paged collection."""
    kind: ReferenceKind
    value: str


@dataclass(slots=True)
class ContentItem:
    """One title recovered from a list page."""
    imdb_id: str
    title: str
    content_type: ContentType = ContentType.UNKNOWN
    year: int | None = None

    def enrich(self, other: ContentItem) -> None:
        """Fill gaps from another observation of the same title.

        Concrete values are never replaced; an unknown type may be upgraded and
        a missing year or placeholder title may be filled in.
        """
        if not self.content_type.is_concrete and other.content_type.is_concrete:
            self.content_type = other.content_type
        if self.year is None and other.year is not None:
            self.year = other.year
        if self.title in ("", "Unknown") and other.title not in ("", "Unknown"):
            self.title = other.title


@dataclass(slots=True)
class PageResult:
    """Items extracted from a single page plus its self-reported total."""
    items: list[ContentItem] = field(default_factory=list)
    declared_total: int = 0


@dataclass(frozen=True, slots=True)
class ResolvedIdentifier:
    """TVDB identifier resolved for an IMDb title via TMDB."""
    tvdb_id: int
    title: str
    tmdb_id: int | None = None


@dataclass(slots=True)
class AggregatedList:
    """Items gathered across pages with pagination bookkeeping."""
    items: list[ContentItem]
    page: int
    total_pages: int | None
    has_more: bool
    pages_fetched: int
    partial: bool = False
