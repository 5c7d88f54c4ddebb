"""Article record assembly from candidate elements and the readability fallback."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from lxml import html
from readability import Document

from adaptive_news.detection.dom import (
    HtmlInput,
    clean_text,
    iter_descendants,
    parse_document,
    strip_xml_declaration,
)
from adaptive_news.detection.patterns import DEFAULT_PATTERNS, NewsPatterns
from adaptive_news.extraction.chain import NO_METHOD, FieldContext, FieldResult
from adaptive_news.extraction.fields import extract_date, extract_link, extract_summary, extract_title
from adaptive_news.extraction.metadata import extract_metadata
from adaptive_news.extraction.urls import normalize_url

logger = logging.getLogger(__name__)

FIELDS = ("title", "link", "date", "summary")

READABILITY_TITLE_CONFIDENCE = 0.7
READABILITY_SUMMARY_CONFIDENCE = 0.6
_READABILITY_NO_TITLE = "[no-title]"


@dataclass
class ArticleRecord:
    """A single extracted news item with per-field confidence and provenance."""

    title: Optional[str]
    link: Optional[str]
    date: Optional[str]
    summary: Optional[str]
    confidence: Dict[str, float] = field(default_factory=dict)
    methods: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, results: Mapping[str, FieldResult]) -> "ArticleRecord":
        confidence = {name: results[name].confidence for name in FIELDS}
        confidence["overall"] = sum(confidence[name] for name in FIELDS) / len(FIELDS)
        return cls(
            title=results["title"].value,
            link=results["link"].value,
            date=results["date"].value,
            summary=results["summary"].value,
            confidence=confidence,
            methods={name: results[name].method for name in FIELDS},
        )

    @property
    def overall_confidence(self) -> float:
        return self.confidence.get("overall", 0.0)

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, name) for name in FIELDS)

    @property
    def has_required_fields(self) -> bool:
        return bool(self.title and self.link)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "date": self.date,
            "summary": self.summary,
            "confidence": dict(self.confidence),
            "methods": dict(self.methods),
        }


def extract_article(
    markup: HtmlInput,
    element: html.HtmlElement,
    base_url: Optional[str],
    *,
    metadata: Optional[Mapping[str, Any]] = None,
    patterns: NewsPatterns = DEFAULT_PATTERNS,
) -> ArticleRecord:
    """Run the four field chains against one candidate element.

    ``metadata`` is derived from ``markup`` when not supplied; callers handling
    many candidates from the same page should extract it once and pass it in.
    Pass it explicitly whenever ``markup`` is an already-parsed tree: trees from
    ``parse_document`` have their ``<script>`` elements stripped, so JSON-LD can
    only be read from the original HTML string.
    """

    if metadata is None:
        metadata = extract_metadata(markup)
    context = FieldContext(element=element, metadata=metadata, base_url=base_url, patterns=patterns)
    return ArticleRecord.from_fields(
        {
            "title": extract_title(context),
            "link": extract_link(context),
            "date": extract_date(context),
            "summary": extract_summary(context),
        }
    )


def _readability_excerpt(document: Document, metadata: Mapping[str, Any]) -> Optional[str]:
    for key in ("description", "og_description"):
        value = metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()

    content = parse_document(document.summary(html_partial=True))
    if content is None:
        return None
    for paragraph in iter_descendants(content, "p"):
        text = clean_text(paragraph)
        if len(text) > 25:
            return text
    return None


def extract_with_readability(markup: Optional[str], page_url: Optional[str]) -> Optional[ArticleRecord]:
    """Treat the whole page as one article using readability-lxml.

    Returns ``None`` when readability fails or finds neither a title nor an
    excerpt; publish dates are never extracted by this path.
    """

    if not markup or not markup.strip():
        return None
    try:
        document = Document(strip_xml_declaration(markup), url=page_url)
        title = document.short_title()
        excerpt_text = _readability_excerpt(document, extract_metadata(markup))
    except Exception as exc:
        logger.warning(
            "Readability extraction failed for %s: %s",
            page_url,
            exc,
            extra={"event": "readability.failed", "url": page_url},
        )
        return None

    title = " ".join(title.split()) if title else None
    if title == _READABILITY_NO_TITLE:
        title = None
    if not title and not excerpt_text:
        return None

    link = normalize_url(page_url, None)
    return ArticleRecord.from_fields(
        {
            "title": FieldResult(title, READABILITY_TITLE_CONFIDENCE if title else 0.0, "readability"),
            "link": FieldResult(link, 1.0 if link else 0.0, "currentUrl"),
            "date": FieldResult(None, 0.0, NO_METHOD),
            "summary": FieldResult(
                excerpt_text, READABILITY_SUMMARY_CONFIDENCE if excerpt_text else 0.0, "readability"
            ),
        }
    )


__all__ = ["ArticleRecord", "FIELDS", "extract_article", "extract_with_readability"]
