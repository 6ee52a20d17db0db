"""Response schemas for list endpoints and Sonarr custom lists."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from watchlist_bridge.models.content import AggregatedList, ContentItem, ContentType


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContentItemOut(CamelModel):
    """Normalized list item as exposed by the API."""
    imdb_id: str
    title: str
    type: ContentType
    year: int | None = None

    @classmethod
    def from_item(cls, item: ContentItem) -> "ContentItemOut":
        return cls(imdb_id=item.imdb_id, title=item.title, type=item.content_type, year=item.year)


class PaginationOut(CamelModel):
    """Pagination bookkeeping for a single-page or aggregated fetch."""
    page: int
    total_pages: int | None = None
    has_more: bool
    pages_fetched: int

    @classmethod
    def from_result(cls, result: AggregatedList) -> "PaginationOut":
        return cls(
            page=result.page,
            total_pages=result.total_pages,
            has_more=result.has_more,
            pages_fetched=result.pages_fetched,
        )


class ItemsResponse(CamelModel):
    """Raw list items with result-window metadata."""
    total_items: int
    offset: int = 0
    limit: int | None = None
    partial: bool = False
    pagination: PaginationOut
    items: list[ContentItemOut]


class WatchlistItemsResponse(ItemsResponse):
    user_id: str


class ListItemsResponse(ItemsResponse):
    list_id: str


class SonarrSeries(BaseModel):
    """One entry of a Sonarr custom import list."""

    model_config = ConfigDict(populate_by_name=True)

    tvdb_id: int = Field(alias="TvdbId")
    title: str | None = Field(default=None, alias="Title")
    tmdb_id: int | None = Field(default=None, alias="TmdbId")
    imdb_id: str | None = Field(default=None, alias="ImdbId")
