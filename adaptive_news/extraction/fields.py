"""Title, link, date and summary fallback chains."""
from __future__ import annotations

import logging
from typing import Iterator, Optional

from dateutil import parser as dateparser

from adaptive_news.detection.dom import (
    TITLE_HEADING_TAGS,
    clean_text,
    is_element,
    iter_descendants,
    matches_pattern,
    raw_text,
    tag_name,
)
from adaptive_news.extraction.chain import (
    ChainStep,
    FieldContext,
    FieldResult,
    calculate_confidence,
    run_chain,
)
from adaptive_news.extraction.urls import normalize_url

logger = logging.getLogger(__name__)

SUMMARY_EXCERPT_LENGTH = 150


def _result(value: Optional[str], confidence: float, method: str) -> Optional[FieldResult]:
    if not value:
        return None
    return FieldResult(value=value, confidence=confidence, method=method)


def _best(results: Iterator[FieldResult]) -> Optional[FieldResult]:
    best: Optional[FieldResult] = None
    for result in results:
        if best is None or result.confidence > best.confidence:
            best = result
    return best


def _texts_matching(context: FieldContext, pattern) -> Iterator[str]:
    for node in iter_descendants(context.element):
        if matches_pattern(node, pattern):
            yield clean_text(node)


# Title


def _title_from_heading(context: FieldContext) -> Optional[FieldResult]:
    for heading in iter_descendants(context.element, *TITLE_HEADING_TAGS):
        text = clean_text(heading)
        if len(text) > 5:
            return _result(text, calculate_confidence(text, 0.9, min_length=10), "heading")
    return None


def _title_from_class_pattern(context: FieldContext) -> Optional[FieldResult]:
    return _best(
        FieldResult(text, calculate_confidence(text, 0.85, min_length=10), "classPattern")
        for text in _texts_matching(context, context.patterns.title)
        if len(text) > 5
    )


def _title_from_anchor(context: FieldContext) -> Optional[FieldResult]:
    candidates = (clean_text(anchor) for anchor in iter_descendants(context.element, "a"))
    return _best(
        FieldResult(text, calculate_confidence(text, 0.75, min_length=15), "anchor")
        for text in candidates
        if 10 < len(text) < 200
    )


def _title_from_metadata(context: FieldContext) -> Optional[FieldResult]:
    title = context.meta("title")
    if title:
        return _result(title, calculate_confidence(title, 0.6), "metadata")
    og_title = context.meta("og_title")
    return _result(og_title, calculate_confidence(og_title, 0.65), "ogMetadata")


def _title_from_first_line(context: FieldContext) -> Optional[FieldResult]:
    lines = raw_text(context.element).strip().split("\n")
    text = " ".join(lines[0].split())
    if 10 < len(text) < 200:
        return _result(text, calculate_confidence(text, 0.4), "firstText")
    return None


TITLE_CHAIN = (
    ChainStep(_title_from_heading),
    ChainStep(_title_from_class_pattern, retry_below=0.8, prefer_higher=True),
    ChainStep(_title_from_anchor, retry_below=0.7, prefer_higher=True),
    ChainStep(_title_from_metadata, retry_below=0.6),
    ChainStep(_title_from_first_line),
)


# Link


def _adjacent_elements(element) -> Iterator[object]:
    """Nearest element siblings: the following one first, then the preceding one."""

    for step in ("getnext", "getprevious"):
        sibling = getattr(element, step)()
        while sibling is not None and not is_element(sibling):
            sibling = getattr(sibling, step)()
        if sibling is not None:
            yield sibling


def _link_from_heading(context: FieldContext) -> Optional[FieldResult]:
    for heading in iter_descendants(context.element, *TITLE_HEADING_TAGS):
        parent = heading.getparent()
        if parent is not None and tag_name(parent) == "a" and parent.get("href"):
            link = normalize_url(parent.get("href"), context.base_url)
            if link:
                return _result(link, calculate_confidence(link, 0.95), "headingParentAnchor")

        anchor = next(iter_descendants(heading, "a"), None)
        if anchor is not None and anchor.get("href"):
            link = normalize_url(anchor.get("href"), context.base_url)
            if link:
                return _result(link, calculate_confidence(link, 0.9), "headingChildAnchor")

        for sibling in _adjacent_elements(heading):
            if tag_name(sibling) != "a" or not sibling.get("href"):
                continue
            link = normalize_url(sibling.get("href"), context.base_url)
            if link:
                return _result(link, calculate_confidence(link, 0.85), "headingSiblingAnchor")
    return None


def _link_from_anchor(context: FieldContext) -> Optional[FieldResult]:
    for anchor in iter_descendants(context.element, "a"):
        href = anchor.get("href")
        if not href or len(clean_text(anchor)) <= 10:
            continue
        link = normalize_url(href, context.base_url)
        if link:
            return _result(link, calculate_confidence(link, 0.8), "substantialAnchor")
    return None


def _link_from_metadata(context: FieldContext) -> Optional[FieldResult]:
    canonical = normalize_url(context.meta("canonical"), context.base_url)
    if canonical:
        return _result(canonical, calculate_confidence(canonical, 0.7), "canonical")
    og_url = normalize_url(context.meta("og_url"), context.base_url)
    return _result(og_url, calculate_confidence(og_url, 0.75), "ogUrl")


def _link_from_page(context: FieldContext) -> Optional[FieldResult]:
    page_url = normalize_url(context.base_url, None)
    return _result(page_url, calculate_confidence(page_url, 0.5), "currentPage")


LINK_CHAIN = (
    ChainStep(_link_from_heading),
    ChainStep(_link_from_anchor),
    ChainStep(_link_from_metadata),
    ChainStep(_link_from_page),
)


# Date


def parses_as_date(value: Optional[str]) -> bool:
    if not value or not value.strip():
        return False
    try:
        dateparser.parse(value)
    except (ValueError, OverflowError) as exc:
        logger.debug("Unparseable datetime attribute %r: %s", value, exc)
        return False
    return True


def _date_from_time_element(context: FieldContext) -> Optional[FieldResult]:
    for node in context.element.xpath(".//time | .//*[@datetime]"):
        datetime_value = node.get("datetime")
        if parses_as_date(datetime_value):
            return _result(datetime_value, calculate_confidence(datetime_value, 0.95), "datetimeAttribute")
        text = clean_text(node)
        if context.patterns.is_likely_date(text):
            return _result(text, calculate_confidence(text, 0.85), "timeElement")
    return None


def _date_from_class_pattern(context: FieldContext) -> Optional[FieldResult]:
    for text in _texts_matching(context, context.patterns.date):
        if context.patterns.is_likely_date(text):
            return _result(text, calculate_confidence(text, 0.8), "dateClassPattern")
    return None


def _date_from_text(context: FieldContext) -> Optional[FieldResult]:
    match = context.patterns.find_date_in_text(clean_text(context.element))
    return _result(match, calculate_confidence(match, 0.7), "regexPattern")


def _date_from_metadata(context: FieldContext) -> Optional[FieldResult]:
    for key, confidence, method in (
        ("published_time", 0.85, "metadataPublishedTime"),
        ("article_published_time", 0.85, "articlePublishedTime"),
        ("modified_time", 0.8, "metadataModifiedTime"),
    ):
        value = context.meta(key)
        if value:
            return _result(value, calculate_confidence(value, confidence), method)
    return None


DATE_CHAIN = (
    ChainStep(_date_from_time_element),
    ChainStep(_date_from_class_pattern),
    ChainStep(_date_from_text),
    ChainStep(_date_from_metadata),
)


# Summary


def _summary_from_class_pattern(context: FieldContext) -> Optional[FieldResult]:
    for text in _texts_matching(context, context.patterns.summary):
        if len(text) > 20:
            return _result(text, calculate_confidence(text, 0.9), "summaryClassPattern")
    return None


def _summary_from_description(context: FieldContext) -> Optional[FieldResult]:
    description = context.meta("description")
    return _result(description, calculate_confidence(description, 0.8), "metaDescription")


def _summary_from_og_description(context: FieldContext) -> Optional[FieldResult]:
    description = context.meta("og_description")
    return _result(description, calculate_confidence(description, 0.85), "ogDescription")


def _summary_from_paragraph(context: FieldContext) -> Optional[FieldResult]:
    for paragraph in iter_descendants(context.element, "p"):
        text = clean_text(paragraph)
        if len(text) > 30 and not context.patterns.is_likely_date(text):
            return _result(text, calculate_confidence(text, 0.7), "firstParagraph")
    return None


def excerpt(text: str, length: int = SUMMARY_EXCERPT_LENGTH) -> str:
    """First ``length`` characters, with ``...`` appended when cut short mid-sentence."""

    summary = text[:length].strip()
    if len(text) > length and not summary.endswith("."):
        summary += "..."
    return summary


def _summary_from_text(context: FieldContext) -> Optional[FieldResult]:
    text = clean_text(context.element)
    if len(text) <= 50:
        return None
    summary = excerpt(text)
    return _result(summary, calculate_confidence(summary, 0.5), "textExtract")


# Description before og:description: first match wins even though the latter scores higher.
SUMMARY_CHAIN = (
    ChainStep(_summary_from_class_pattern),
    ChainStep(_summary_from_description),
    ChainStep(_summary_from_og_description),
    ChainStep(_summary_from_paragraph),
    ChainStep(_summary_from_text),
)


def extract_title(context: FieldContext) -> FieldResult:
    return run_chain(TITLE_CHAIN, context)


def extract_link(context: FieldContext) -> FieldResult:
    return run_chain(LINK_CHAIN, context)


def extract_date(context: FieldContext) -> FieldResult:
    return run_chain(DATE_CHAIN, context)


def extract_summary(context: FieldContext) -> FieldResult:
    return run_chain(SUMMARY_CHAIN, context)


__all__ = [
    "DATE_CHAIN",
    "LINK_CHAIN",
    "SUMMARY_CHAIN",
    "TITLE_CHAIN",
    "excerpt",
    "extract_date",
    "extract_link",
    "extract_summary",
    "extract_title",
    "parses_as_date",
]
