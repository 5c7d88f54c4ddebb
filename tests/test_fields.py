from __future__ import annotations

import re
from typing import Any, Dict, Optional

import pytest
from lxml.html import builder as E

from adaptive_news.detection.dom import parse_document
from adaptive_news.detection.patterns import DEFAULT_PATTERNS
from adaptive_news.extraction.chain import (
    ChainStep,
    FieldContext,
    FieldResult,
    calculate_confidence,
    run_chain,
)
from adaptive_news.extraction.fields import (
    excerpt,
    extract_date,
    extract_link,
    extract_summary,
    extract_title,
    parses_as_date,
)

BASE_URL = "https://news.example/section/"


def _context(markup, metadata: Optional[Dict[str, Any]] = None, base_url: Optional[str] = BASE_URL) -> FieldContext:
    if isinstance(markup, str):
        element = parse_document(f"<html><body>{markup}</body></html>").xpath("//body/*[1]")[0]
    else:
        element = markup
    return FieldContext(element=element, metadata=metadata or {}, base_url=base_url, patterns=DEFAULT_PATTERNS)


# Confidence and chain runner


def test_calculate_confidence_adjustments() -> None:
    assert calculate_confidence(None, 0.9) == 0.0
    assert calculate_confidence("", 0.9) == 0.0
    assert calculate_confidence("long enough value", 0.9, min_length=10) == pytest.approx(0.9)
    assert calculate_confidence("short", 0.9, min_length=10) == pytest.approx(0.72)
    assert calculate_confidence("abc", 0.9, format=re.compile(r"\d")) == pytest.approx(0.63)
    assert calculate_confidence("abc", 0.9, source_reliability=0.5) == pytest.approx(0.45)
    assert calculate_confidence("abc", 1.5) == 1.0
    assert calculate_confidence("abc", -0.5) == 0.0


def test_run_chain_first_acceptable_or_best_seen() -> None:
    calls = []

    def fixed(value, confidence, method):
        def strategy(_context):
            calls.append(method)
            return FieldResult(value, confidence, method) if value else None

        return strategy

    context = _context("<div>x</div>")
    steps = (
        ChainStep(fixed("first", 0.65, "a")),
        ChainStep(fixed("better", 0.75, "b"), retry_below=0.8, prefer_higher=True),
        ChainStep(fixed("worse", 0.5, "c"), retry_below=0.8, prefer_higher=True),
        ChainStep(fixed("skipped", 0.99, "d"), retry_below=0.7),
        ChainStep(fixed("never", 0.99, "e")),
    )
    result = run_chain(steps, context)

    assert result == FieldResult("better", 0.75, "b")
    assert calls == ["a", "b", "c"]


def test_run_chain_without_values_is_empty() -> None:
    result = run_chain((ChainStep(lambda _context: None),), _context("<div>x</div>"))
    assert result == FieldResult(None, 0.0, "none")


# Title


def test_title_prefers_heading() -> None:
    result = extract_title(_context("<div><h2>Council approves the park plan</h2><p>Body text</p></div>"))
    assert result == FieldResult("Council approves the park plan", pytest.approx(0.9), "heading")


def test_title_class_pattern_beats_short_heading() -> None:
    result = extract_title(
        _context('<div><h3>Short1</h3><span class="headline">A much longer headline text</span></div>')
    )
    assert result.value == "A much longer headline text"
    assert result.method == "classPattern"
    assert result.confidence == pytest.approx(0.85)


def test_title_from_anchor_text() -> None:
    result = extract_title(_context('<div><a href="/a">This is a fairly long anchor title</a></div>'))
    assert (result.value, result.method) == ("This is a fairly long anchor title", "anchor")
    assert result.confidence == pytest.approx(0.75)


def test_title_falls_back_to_metadata() -> None:
    result = extract_title(_context("<div><span>tiny</span></div>", {"title": "Meta title"}))
    assert result == FieldResult("Meta title", 0.6, "metadata")

    result = extract_title(_context("<div><span>tiny</span></div>", {"og_title": "OG title"}))
    assert result == FieldResult("OG title", 0.65, "ogMetadata")


def test_title_last_resort_first_line() -> None:
    result = extract_title(_context("<div>Plain text line that is long enough\nsecond line</div>"))
    assert result == FieldResult("Plain text line that is long enough", 0.4, "firstText")


def test_title_missing() -> None:
    assert extract_title(_context("<div>tiny</div>")) == FieldResult(None, 0.0, "none")


# Link


def test_link_from_heading_wrapped_in_anchor() -> None:
    element = E.DIV(E.A(E.H2("Heading text"), href="/wrapped"))
    result = extract_link(_context(element))
    assert result == FieldResult("https://news.example/wrapped", 0.95, "headingParentAnchor")


def test_link_from_anchor_inside_heading() -> None:
    result = extract_link(_context('<div><h2><a href="child">Heading text</a></h2></div>'))
    assert result == FieldResult("https://news.example/section/child", 0.9, "headingChildAnchor")


def test_link_from_anchor_next_to_heading() -> None:
    result = extract_link(_context('<div><h2>Heading</h2><a href="/x">Heading</a></div>'))
    assert result == FieldResult("https://news.example/x", 0.85, "headingSiblingAnchor")


def test_link_from_substantial_anchor() -> None:
    result = extract_link(_context('<div><a href="/short">tiny</a><a href="/long">A long enough anchor</a></div>'))
    assert result == FieldResult("https://news.example/long", 0.8, "substantialAnchor")


def test_link_from_metadata() -> None:
    metadata = {"canonical": "/canonical", "og_url": "https://news.example/og"}
    assert extract_link(_context("<div>x</div>", metadata)) == FieldResult(
        "https://news.example/canonical", 0.7, "canonical"
    )
    assert extract_link(_context("<div>x</div>", {"og_url": "https://news.example/og"})) == FieldResult(
        "https://news.example/og", 0.75, "ogUrl"
    )


def test_link_skips_malformed_href_and_uses_page_url() -> None:
    result = extract_link(_context('<div><a href="http://[bad">A long enough anchor</a></div>'))
    assert result == FieldResult(BASE_URL, 0.5, "currentPage")


def test_link_missing_without_base_url() -> None:
    assert extract_link(_context("<div>x</div>", base_url=None)) == FieldResult(None, 0.0, "none")


# Date


def test_date_prefers_datetime_attribute() -> None:
    result = extract_date(_context('<div><time datetime="2024-01-01T08:00:00Z">Jan 1</time></div>'))
    assert result == FieldResult("2024-01-01T08:00:00Z", 0.95, "datetimeAttribute")


def test_date_from_time_text_when_attribute_invalid() -> None:
    result = extract_date(_context('<div><time datetime="pending">March 3, 2024</time></div>'))
    assert result == FieldResult("March 3, 2024", 0.85, "timeElement")


def test_date_from_class_pattern() -> None:
    result = extract_date(_context('<div><span class="post-date">2 days ago</span><p>Body</p></div>'))
    assert result == FieldResult("2 days ago", 0.8, "dateClassPattern")


def test_date_from_free_text() -> None:
    result = extract_date(_context("<div><p>Filed 12/05/2023 by the city desk</p></div>"))
    assert result == FieldResult("12/05/2023", 0.7, "regexPattern")


def test_date_from_metadata_order() -> None:
    metadata = {"modified_time": "2024-01-03", "article_published_time": "2024-01-02"}
    assert extract_date(_context("<div>x</div>", metadata)) == FieldResult(
        "2024-01-02", 0.85, "articlePublishedTime"
    )
    metadata["published_time"] = "2024-01-01"
    assert extract_date(_context("<div>x</div>", metadata)) == FieldResult(
        "2024-01-01", 0.85, "metadataPublishedTime"
    )
    assert extract_date(_context("<div>x</div>", {"modified_time": "2024-01-03"})) == FieldResult(
        "2024-01-03", 0.8, "metadataModifiedTime"
    )


def test_parses_as_date() -> None:
    assert parses_as_date("2024-03-04")
    assert parses_as_date("Mon, 04 Mar 2024 10:00:00 GMT")
    assert not parses_as_date("soon")
    assert not parses_as_date("")
    assert not parses_as_date(None)


# Summary


def test_summary_from_class_pattern() -> None:
    result = extract_summary(_context('<div><div class="teaser">A teaser that is longer than twenty</div></div>'))
    assert result == FieldResult("A teaser that is longer than twenty", 0.9, "summaryClassPattern")


def test_summary_description_checked_before_og_description() -> None:
    metadata = {"description": "Plain description", "og_description": "OpenGraph description"}
    assert extract_summary(_context("<div>x</div>", metadata)) == FieldResult(
        "Plain description", 0.8, "metaDescription"
    )
    assert extract_summary(_context("<div>x</div>", {"og_description": "OpenGraph description"})) == FieldResult(
        "OpenGraph description", 0.85, "ogDescription"
    )


def test_summary_skips_date_like_paragraphs() -> None:
    result = extract_summary(
        _context("<div><p>Updated yesterday at noon by the city desk</p><p>The real first paragraph of the story.</p></div>")
    )
    assert result == FieldResult("The real first paragraph of the story.", 0.7, "firstParagraph")


def test_summary_text_extract_is_truncated() -> None:
    result = extract_summary(_context("<div>" + "word " * 60 + "</div>"))
    assert result.method == "textExtract"
    assert result.confidence == 0.5
    assert result.value.endswith("...")
    assert len(result.value) <= 153


def test_excerpt_keeps_short_text_and_sentence_end() -> None:
    assert excerpt("Short text.") == "Short text."
    assert excerpt("x" * 149 + ". more text beyond") == "x" * 149 + "."
