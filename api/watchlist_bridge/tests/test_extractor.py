"""Extraction passes over list page markup: blob walk, anchors, and linked data."""

from __future__ import annotations

import json

from watchlist_bridge.ingestion.extractor import extract_items, extract_page, iter_objects
from watchlist_bridge.models.content import ContentItem, ContentType

ANCHOR_LIST_HTML = """
<ul class="ipc-metadata-list">
  <li class="ipc-metadata-list-summary-item" data-testid="list-page-mc-list-item">
    <a href="/title/tt0903747/?ref_=ls_t_1" class="ipc-title-link-wrapper">
      <h3 class="ipc-title__text">1. Breaking Bad</h3>
    </a>
    <div class="metadata"><span>2008–2013</span><span>62 eps</span><span>TV-MA</span></div>
  </li>
  <li class="ipc-metadata-list-summary-item" data-testid="list-page-mc-list-item">
    <a href="/title/tt0111161/?ref_=ls_i_2"><span>2</span></a>
    <h3 class="ipc-title__text">2. The Shawshank Redemption</h3>
    <div class="metadata"><span>1994</span><span>2h 22m</span><span>R</span></div>
    <a href="/title/tt0111161/?ref_=ls_t_2">Rate</a>
  </li>
  <li class="ipc-metadata-list-summary-item" data-testid="list-page-mc-list-item">
    <a href="/title/tt7366338/"><h3 class="ipc-title__text">3. Chernobyl</h3></a>
    <div class="metadata"><span>TV Mini Series</span><span>2019</span><span>5 eps</span></div>
  </li>
</ul>
<footer><a href="/title/tt9999999/">Trending title</a></footer>
"""


def _ld_json(entries: list[dict]) -> str:
    block = {"@context": "https://schema.org", "@type": "ItemList", "itemListElement": entries}
    return f'<script type="application/ld+json">{json.dumps(block)}</script>'


def _by_id(items: list[ContentItem]) -> dict[str, ContentItem]:
    return {item.imdb_id: item for item in items}


def test_blob_walk_reads_titles_types_and_years(next_data_page, title_node) -> None:
    html = next_data_page(
        [
            title_node("tt1234567", "Test Series", "tvSeries", 2023),
            title_node("tt7654321", "Test Movie", "movie", 2020),
        ]
    )

    items = extract_items(html)

    assert items == [
        ContentItem("tt1234567", "Test Series", ContentType.SERIES, 2023),
        ContentItem("tt7654321", "Test Movie", ContentType.MOVIE, 2020),
    ]


def test_blob_walk_accepts_alternative_field_shapes() -> None:
    blob = {
        "items": [
            {"const": "tt0000001", "originalTitleText": {"text": "Original"}, "year": 1999},
            {"id": "tt0000002", "title": "Flat Title", "titleType": "TV Mini Series", "releaseDate": "2019-05-06"},
            {"id": "tt0000003", "name": {"text": "Named"}, "releaseDate": {"day": 1, "month": 2, "year": 2001}},
            {"id": "tt0000004", "titleType": {"id": "movie"}},
            {"id": "nm0000005", "titleText": {"text": "A person"}},
        ]
    }
    html = f'<script id="__NEXT_DATA__">{json.dumps(blob)}</script>'

    items = _by_id(extract_items(html))

    assert items["tt0000001"] == ContentItem("tt0000001", "Original", ContentType.UNKNOWN, 1999)
    assert items["tt0000002"] == ContentItem("tt0000002", "Flat Title", ContentType.MINI_SERIES, 2019)
    assert items["tt0000003"].year == 2001
    assert "tt0000004" not in items
    assert "nm0000005" not in items


def test_blob_walk_keeps_first_titled_occurrence(next_data_page, title_node) -> None:
    html = next_data_page(
        [
            {"id": "tt0000001"},
            title_node("tt0000001", "First", "tvSeries", 2001),
            title_node("tt0000001", "Second", "movie", 2002),
        ]
    )

    assert extract_items(html) == [ContentItem("tt0000001", "First", ContentType.SERIES, 2001)]


def test_anchor_scan_reads_titles_types_and_years() -> None:
    items = _by_id(extract_items(ANCHOR_LIST_HTML))

    assert list(items) == ["tt0903747", "tt0111161", "tt7366338"]
    assert items["tt0903747"] == ContentItem("tt0903747", "Breaking Bad", ContentType.SERIES, 2008)
    assert items["tt0111161"] == ContentItem("tt0111161", "The Shawshank Redemption", ContentType.MOVIE, 1994)
    assert items["tt7366338"] == ContentItem("tt7366338", "Chernobyl", ContentType.MINI_SERIES, 2019)


def test_anchor_scan_falls_back_to_any_title_anchor() -> None:
    html = '<div><a href="https://www.imdb.com/title/tt0000042/">  </a><a href="/title/tt0000043/">7.</a></div>'

    items = extract_items(html)

    assert [item.imdb_id for item in items] == ["tt0000042", "tt0000043"]
    assert all(item.title == "Unknown" for item in items)
    assert all(item.content_type is ContentType.UNKNOWN and item.year is None for item in items)


def test_linked_data_inserts_new_items_and_enriches_existing_ones() -> None:
    html = (
        '<li class="lister-item"><a href="/title/tt0000001/">Mystery Show</a> 4.5</li>'
        + _ld_json(
            [
                {
                    "@type": "ListItem",
                    "item": {"@type": "TVSeries", "url": "/title/tt0000001/", "name": "Mystery Show"},
                },
                {
                    "@type": "ListItem",
                    "item": {
                        "@type": "TVMiniSeries",
                        "url": "https://www.imdb.com/title/tt0000002/",
                        "name": "Dark Limited",
                        "datePublished": "2017-12-01",
                    },
                },
                {"@type": "ListItem", "item": {"@type": "Movie", "name": "No url"}},
            ]
        )
    )

    items = _by_id(extract_items(html))

    assert items["tt0000001"] == ContentItem("tt0000001", "Mystery Show", ContentType.SERIES, None)
    assert items["tt0000002"] == ContentItem("tt0000002", "Dark Limited", ContentType.MINI_SERIES, 2017)
    assert len(items) == 2


def test_linked_data_never_overwrites_concrete_values(next_data_page, title_node) -> None:
    html = next_data_page(
        [title_node("tt0000001", "Chernobyl", "tvMiniSeries", 2019), title_node("tt0000002", "Odd", "tvEpisode", None)],
        extra_html=_ld_json(
            [
                {"item": {"@type": "TVSeries", "url": "/title/tt0000001/", "datePublished": "2020-01-01"}},
                {"item": {"@type": "CreativeWork", "url": "/title/tt0000002/", "datePublished": "2021-03-04"}},
            ]
        ),
    )

    items = _by_id(extract_items(html))

    assert items["tt0000001"] == ContentItem("tt0000001", "Chernobyl", ContentType.MINI_SERIES, 2019)
    assert items["tt0000002"] == ContentItem("tt0000002", "Odd", ContentType.UNKNOWN, 2021)


def test_anchor_pass_upgrades_unknown_blob_type(next_data_page, title_node) -> None:
    html = next_data_page(
        [title_node("tt0903747", "Breaking Bad", "tvEpisode", None)],
        extra_html=ANCHOR_LIST_HTML,
    )

    items = _by_id(extract_items(html))

    assert items["tt0903747"] == ContentItem("tt0903747", "Breaking Bad", ContentType.SERIES, 2008)


def test_malformed_json_blocks_fall_back_to_other_passes() -> None:
    html = (
        '<script id="__NEXT_DATA__" type="application/json">{"props": [</script>'
        '<script type="application/ld+json">not json at all</script>'
        + ANCHOR_LIST_HTML
    )

    result = extract_page(html)

    assert [item.imdb_id for item in result.items] == ["tt0903747", "tt0111161", "tt7366338"]
    assert result.declared_total == 0


def test_empty_page_yields_nothing() -> None:
    assert extract_page("").items == []
    assert extract_page("<html><body><p>Private list</p></body></html>").declared_total == 0


def test_ids_seen_by_every_pass_are_collected_once(next_data_page, title_node) -> None:
    html = next_data_page(
        [title_node("tt0903747", "Breaking Bad", "tvSeries", 2008)],
        extra_html=ANCHOR_LIST_HTML
        + _ld_json([{"item": {"@type": "TVSeries", "url": "/title/tt0903747/", "name": "Breaking Bad"}}]),
    )

    first = [item.imdb_id for item in extract_items(html)]
    second = [item.imdb_id for item in extract_items(html)]

    assert first == second
    assert len(first) == len(set(first)) == 3


def test_declared_total_from_blob_and_rendered_count(next_data_page, title_node) -> None:
    assert extract_page(next_data_page([title_node("tt1", "One")], total=1234)).declared_total == 1234
    assert extract_page('<div data-testid="list-page-mc-total-items">1,234 titles</div>').declared_total == 1234
    assert extract_page('<div class="lister-total-items">87 titles</div>').declared_total == 87


def test_title_counts_outside_the_list_header_are_ignored() -> None:
    html = '<nav><a href="/chart">Top 250 titles</a></nav><p>Browse 5 titles trending now</p>'

    assert extract_page(html).declared_total == 0


def test_blob_ids_must_match_the_whole_id_pattern() -> None:
    blob = {
        "a": {"id": "tt123\n", "titleText": {"text": "Trailing newline"}},
        "b": {"id": "xtt456", "titleText": {"text": "Prefixed"}},
        "c": {"id": "tt789", "titleText": {"text": "Clean"}},
    }
    html = f'<script id="__NEXT_DATA__">{json.dumps(blob)}</script>'

    assert [item.imdb_id for item in extract_items(html)] == ["tt789"]


def test_iter_objects_visits_nested_nodes_in_document_order() -> None:
    tree = {"a": {"id": 1}, "b": [{"id": 2, "c": {"id": 3}}, [{"id": 4}]], "d": "text"}

    ids = [node.get("id") for node in iter_objects(tree)]

    assert ids == [None, 1, 2, 3, 4]
