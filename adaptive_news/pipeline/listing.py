"""Generic listing extractors.

Candidate detection merges elements by selector, so a grid of identical cards
yields a single candidate. These extractors walk the common listing shapes
(article blocks, titled links, heading lists, table rows, cards, data-attribute
items and search results) and emit one record per item. Every record is scored
the same way: title 0.9 when long enough (else 0.5), link 0.9, date 0.8 when
present (else 0.3), summary 0.8 when longer than 20 characters (else 0.4), and
the item is kept when the mean clears the extractor's threshold.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from lxml import html

from adaptive_news.detection.dom import HtmlInput, attribute, clean_text, is_element, parse_document, tag_name
from adaptive_news.extraction.chain import NO_METHOD, FieldResult
from adaptive_news.extraction.extractor import ArticleRecord
from adaptive_news.extraction.urls import normalize_url

logger = logging.getLogger(__name__)


def _has_class(name: str) -> str:
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


def _any_of(*conditions: str) -> str:
    return " or ".join(conditions)


TITLE_XPATH = ".//*[{}]".format(
    _any_of("self::h1", "self::h2", "self::h3", "self::h4", _has_class("title"), _has_class("headline"))
)
DATE_XPATH = ".//*[{}]".format(
    _any_of(
        "self::time",
        _has_class("date"),
        _has_class("time"),
        "@datetime",
        "@data-date",
        _has_class("published"),
        _has_class("timestamp"),
    )
)
SUMMARY_XPATH = ".//*[{}]".format(
    _any_of(
        "self::p",
        _has_class("summary"),
        _has_class("description"),
        _has_class("excerpt"),
        _has_class("teaser"),
    )
)
NEARBY_DATE_XPATH = ".//*[{}]".format(_any_of("self::time", _has_class("date"), _has_class("time"), "@datetime"))

STANDARD_ITEM_XPATH = "//*[{}]".format(
    _any_of(
        "self::article",
        _has_class("article"),
        "contains(@itemtype, 'Article')",
        _has_class("news-item"),
        _has_class("story"),
        _has_class("post"),
    )
)
CARD_ITEM_XPATH = "//*[{}]".format(
    _any_of(*(f"contains(@class, '{name}')" for name in ("card", "tile", "box", "item", "result")))
)
DATA_ITEM_XPATH = "//*[{}]".format(
    _any_of("@data-article-id", "@data-id", "@data-post-id", "@data-item-id", "@data-entry-id")
)
SEARCH_ITEM_XPATH = "//*[{}]".format(
    _any_of(
        _has_class("search-result"),
        _has_class("result"),
        _has_class("search-item"),
        "contains(@class, 'search-result')",
        "contains(@class, 'search-item')",
    )
)

LISTING_HEADING_TAGS = ("h2", "h3", "h4")
CHROME_CLASS_FRAGMENTS = ("nav", "menu", "footer", "header", "sidebar")
HEADING_SKIP_LINK_FRAGMENTS = ("/category/", "/tag/", "/author/", "/about/", "/contact/", "/privacy/", "/terms/")

_SLASH_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}")
_WORDY_DATE_RE = re.compile(r"\d{1,2}\s+\w+\s+\d{2,4}")
_TABLE_DATE_RES = (
    _SLASH_DATE_RE,
    re.compile(r"\d{1,2}-\d{1,2}-\d{2,4}"),
    _WORDY_DATE_RE,
    re.compile(r"\d{4}-\d{1,2}-\d{1,2}"),
)

ListingExtractor = Callable[[html.HtmlElement, Optional[str]], Iterable[ArticleRecord]]


def _first(element: html.HtmlElement, xpath: str) -> Optional[html.HtmlElement]:
    found = element.xpath(xpath)
    return found[0] if found else None


def _contains(container: html.HtmlElement, element: html.HtmlElement) -> bool:
    return container is element or any(ancestor is container for ancestor in element.iterancestors())


def _date_value(element: Optional[html.HtmlElement]) -> Optional[str]:
    if element is None:
        return None
    return element.get("datetime") or clean_text(element) or None


def _next_siblings(element: html.HtmlElement, limit: Optional[int] = None) -> Iterator[html.HtmlElement]:
    sibling = element.getnext()
    seen = 0
    while sibling is not None and (limit is None or seen < limit):
        if is_element(sibling):
            yield sibling
            seen += 1
        sibling = sibling.getnext()


def _class_mentions(element: html.HtmlElement, *fragments: str) -> bool:
    classes = attribute(element, "class").lower()
    return any(fragment in classes for fragment in fragments)


def _looks_like_date_sibling(element: html.HtmlElement, *, check_text: bool) -> bool:
    if tag_name(element) == "time" or _class_mentions(element, "date", "time"):
        return True
    if not check_text:
        return False
    text = clean_text(element)
    return bool(_SLASH_DATE_RE.search(text) or _WORDY_DATE_RE.search(text))


def _looks_like_summary_sibling(element: html.HtmlElement) -> bool:
    return tag_name(element) == "p" or _class_mentions(element, "summary", "description")


def _score(title: str, date: Optional[str], summary: Optional[str], title_min: int) -> Tuple[float, ...]:
    return (
        0.9 if len(title) > title_min else 0.5,
        0.9,
        0.8 if date else 0.3,
        0.8 if summary and len(summary) > 20 else 0.4,
    )


def build_record(
    method: str,
    title: Optional[str],
    href: Optional[str],
    date: Optional[str],
    summary: Optional[str],
    page_url: Optional[str],
    *,
    title_min: int = 10,
    threshold: float = 0.6,
) -> Optional[ArticleRecord]:
    """Score one listing item; ``None`` when it lacks a title or link or scores too low.

    Absent date and summary fields count toward the threshold with their floor
    score but are recorded with zero confidence, like every other empty field.
    """

    link = normalize_url(href, page_url)
    if not title or not link:
        return None
    scores = _score(title, date, summary, title_min)
    if sum(scores) / len(scores) <= threshold:
        return None

    values = (title, link, date or None, summary or None)
    results = {
        name: FieldResult(value, score, method) if value else FieldResult(None, 0.0, NO_METHOD)
        for name, value, score in zip(("title", "link", "date", "summary"), values, scores)
    }
    return ArticleRecord.from_fields(results)


def _titled_item(method: str, item: html.HtmlElement, page_url: Optional[str]) -> Optional[ArticleRecord]:
    """Shared shape for cards, data-attribute items and search results."""

    title_element = _first(item, TITLE_XPATH)
    if title_element is None:
        return None
    anchor = _first(title_element, ".//a")
    if anchor is None:
        anchor = _first(item, ".//a")
    if anchor is None:
        return None

    summary_element = _first(item, SUMMARY_XPATH)
    summary = None
    if summary_element is not None and not _contains(summary_element, title_element):
        summary = clean_text(summary_element)
    return build_record(
        method,
        clean_text(title_element),
        anchor.get("href"),
        _date_value(_first(item, DATE_XPATH)),
        summary,
        page_url,
    )


def standard_articles(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for item in root.xpath(STANDARD_ITEM_XPATH):
        title_element = _first(item, TITLE_XPATH)
        title = clean_text(title_element) if title_element is not None else ""
        anchor = _first(item, ".//a")
        href = anchor.get("href") if anchor is not None else None
        if not href and title_element is not None:
            title_anchor = _first(title_element, ".//a")
            href = title_anchor.get("href") if title_anchor is not None else None
        summary_element = _first(item, SUMMARY_XPATH)
        record = build_record(
            "standardArticle",
            title,
            href,
            _date_value(_first(item, DATE_XPATH)),
            clean_text(summary_element) if summary_element is not None else None,
            page_url,
            threshold=0.5,
        )
        if record is not None:
            yield record


def substantial_links(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for anchor in root.iter("a"):
        title = clean_text(anchor)
        if len(title) < 20:
            continue
        parent = anchor.getparent()
        if parent is not None and _class_mentions(parent, *CHROME_CLASS_FRAGMENTS):
            continue

        date_element = next(
            (sibling for sibling in _next_siblings(anchor) if _looks_like_date_sibling(sibling, check_text=False)),
            None,
        )
        if date_element is None and parent is not None:
            date_element = _first(parent, NEARBY_DATE_XPATH)

        summary_element = next(
            (sibling for sibling in _next_siblings(anchor) if _looks_like_summary_sibling(sibling)),
            None,
        )
        if summary_element is None and parent is not None:
            summary_element = _first(parent, SUMMARY_XPATH)
            if summary_element is anchor:
                summary_element = None

        record = build_record(
            "substantialLink",
            title,
            anchor.get("href"),
            _date_value(date_element),
            clean_text(summary_element) if summary_element is not None else None,
            page_url,
            title_min=20,
        )
        if record is not None:
            yield record


def _siblings_before_next_heading(heading: html.HtmlElement) -> Iterator[html.HtmlElement]:
    for sibling in _next_siblings(heading):
        if tag_name(sibling) in LISTING_HEADING_TAGS:
            return
        yield sibling


def flat_search_results(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for heading in root.xpath("//*[self::h2 or self::h3 or self::h4]"):
        anchor = _first(heading, ".//a")
        if anchor is None:
            continue
        date_element = next(
            (s for s in _siblings_before_next_heading(heading) if _looks_like_date_sibling(s, check_text=True)),
            None,
        )
        summary_element = next(
            (s for s in _siblings_before_next_heading(heading) if _looks_like_summary_sibling(s)),
            None,
        )
        record = build_record(
            "flatSearch",
            clean_text(anchor),
            anchor.get("href"),
            _date_value(date_element),
            clean_text(summary_element) if summary_element is not None else None,
            page_url,
        )
        if record is not None:
            yield record


def table_rows(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for row in root.iter("tr"):
        if _first(row, ".//th") is not None:
            continue
        anchor = _first(row, ".//a")
        if anchor is None:
            continue
        cells = [cell for cell in row.iter("td") if not _contains(cell, anchor)]

        date = None
        for cell in cells:
            text = clean_text(cell)
            if any(pattern.search(text) for pattern in _TABLE_DATE_RES):
                date = text
                break
            time_element = _first(cell, ".//time")
            if time_element is not None:
                date = _date_value(time_element)
                break

        texts = [clean_text(cell) for cell in cells]
        summary = next((text for text in texts if text != date and len(text) > 20), None)
        record = build_record("tableBased", clean_text(anchor), anchor.get("href"), date, summary, page_url)
        if record is not None:
            yield record


def card_items(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for item in root.xpath(CARD_ITEM_XPATH):
        record = _titled_item("cardBased", item, page_url)
        if record is not None:
            yield record


def data_attribute_items(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for item in root.xpath(DATA_ITEM_XPATH):
        record = _titled_item("dataAttribute", item, page_url)
        if record is not None:
            yield record


def search_result_items(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for item in root.xpath(SEARCH_ITEM_XPATH):
        record = _titled_item("searchResult", item, page_url)
        if record is not None:
            yield record


def heading_items(root: html.HtmlElement, page_url: Optional[str]) -> Iterator[ArticleRecord]:
    for heading in root.xpath("//*[self::h1 or self::h2 or self::h3 or self::h4 or self::h5]"):
        title = clean_text(heading)
        # Short or shouted headings are section labels.
        if len(title) < 15 or title.upper() == title:
            continue
        anchor = _first(heading, ".//a")
        if anchor is None:
            continue
        href = anchor.get("href") or ""
        if any(fragment in href for fragment in HEADING_SKIP_LINK_FRAGMENTS):
            continue

        nearby = list(_next_siblings(heading, limit=3))
        date_element = next((s for s in nearby if _looks_like_date_sibling(s, check_text=True)), None)
        summary_element = next((s for s in nearby if _looks_like_summary_sibling(s)), None)
        record = build_record(
            "headingBased",
            title,
            href,
            _date_value(date_element),
            clean_text(summary_element) if summary_element is not None else None,
            page_url,
            title_min=15,
        )
        if record is not None:
            yield record


LISTING_EXTRACTORS: Tuple[Tuple[str, ListingExtractor], ...] = (
    ("standardArticle", standard_articles),
    ("substantialLink", substantial_links),
    ("flatSearch", flat_search_results),
    ("tableBased", table_rows),
    ("cardBased", card_items),
    ("dataAttribute", data_attribute_items),
    ("searchResult", search_result_items),
    ("headingBased", heading_items),
)


def extract_listing_records(markup: HtmlInput, page_url: Optional[str]) -> List[ArticleRecord]:
    """Run every listing extractor in order; duplicates are left to the caller."""

    root = parse_document(markup)
    if root is None:
        return []

    records: List[ArticleRecord] = []
    for name, extractor in LISTING_EXTRACTORS:
        found = list(extractor(root, page_url))
        if found:
            logger.debug(
                "Listing extractor %s found %d items",
                name,
                len(found),
                extra={"event": "listing.extracted", "extractor": name, "items": len(found)},
            )
        records.extend(found)
    return records


__all__ = [
    "LISTING_EXTRACTORS",
    "build_record",
    "card_items",
    "data_attribute_items",
    "extract_listing_records",
    "flat_search_results",
    "heading_items",
    "search_result_items",
    "standard_articles",
    "substantial_links",
    "table_rows",
]
