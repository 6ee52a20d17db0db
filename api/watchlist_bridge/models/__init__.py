from watchlist_bridge.models.content import (
    IMDB_ID_RE,
    TV_CONTENT_TYPES,
    AggregatedList,
    ContentItem,
    ContentType,
    ListReference,
    PageResult,
    ReferenceKind,
    ResolvedIdentifier,
)

__all__ = [
    "IMDB_ID_RE",
    "TV_CONTENT_TYPES",
    "AggregatedList",
    "ContentItem",
    "ContentType",
    "ListReference",
    "PageResult",
    "ReferenceKind",
    "ResolvedIdentifier",
]
