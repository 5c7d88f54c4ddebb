"""Page-level orchestration around detection and extraction."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from adaptive_news.config.settings import AppSettings
from adaptive_news.detection.detector import detect_candidates
from adaptive_news.detection.dom import parse_document
from adaptive_news.detection.patterns import DEFAULT_PATTERNS, NewsPatterns
from adaptive_news.extraction.extractor import ArticleRecord, extract_article, extract_with_readability
from adaptive_news.extraction.metadata import extract_metadata
from adaptive_news.pipeline.filters import filter_records
from adaptive_news.pipeline.listing import extract_listing_records
from adaptive_news.telemetry import metrics

logger = logging.getLogger(__name__)


@dataclass
class ExtractionStats:
    methods_used: Set[str] = field(default_factory=set)
    complete_items: int = 0
    partial_items: int = 0
    total_items: int = 0

    @property
    def success_rate(self) -> float:
        if not self.total_items:
            return 0.0
        return self.complete_items / self.total_items

    @classmethod
    def from_records(cls, records: Iterable[ArticleRecord]) -> "ExtractionStats":
        stats = cls()
        for record in records:
            stats.total_items += 1
            stats.methods_used.update(method for method in record.methods.values() if method)
            if record.is_complete:
                stats.complete_items += 1
            elif record.title or record.link:
                stats.partial_items += 1
        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "methodsUsed": sorted(self.methods_used),
            "successRate": self.success_rate,
            "completeItems": self.complete_items,
            "partialItems": self.partial_items,
        }


@dataclass
class PageExtraction:
    url: str
    records: List[ArticleRecord]
    candidate_count: int = 0
    used_fallback: bool = False

    @property
    def stats(self) -> ExtractionStats:
        return ExtractionStats.from_records(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "newsItems": [record.to_dict() for record in self.records],
            "totalCount": len(self.records),
            "url": self.url,
            "extractionStats": self.stats.to_dict(),
        }


def dedupe_by_link(records: Iterable[ArticleRecord], seen: Optional[Set[str]] = None) -> List[ArticleRecord]:
    """Keep the first record per link; ``seen`` is updated in place when given."""

    seen = set() if seen is None else seen
    unique: List[ArticleRecord] = []
    for record in records:
        if record.link in seen:
            continue
        if record.link:
            seen.add(record.link)
        unique.append(record)
    return unique


def cap_records(records: List[ArticleRecord], max_items: int) -> List[ArticleRecord]:
    if max_items > 0:
        return records[:max_items]
    return records


class NewsExtractionService:
    """Turn one rendered page into a gated, deduplicated list of article records."""

    def __init__(self, settings: Optional[AppSettings] = None, patterns: NewsPatterns = DEFAULT_PATTERNS) -> None:
        self._settings = settings or AppSettings()
        self._patterns = patterns

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def extract_page(self, html: str, page_url: str) -> PageExtraction:
        start_time = time.perf_counter()
        detection = self._settings.detection
        extraction = self._settings.extraction
        status = "success"

        metadata = extract_metadata(html)
        root = parse_document(html)
        candidates = detect_candidates(
            root,
            self._patterns,
            max_depth=detection.max_scan_depth,
            max_candidates=detection.max_candidates,
        )
        records = [
            extract_article(html, candidate.element, page_url, metadata=metadata, patterns=self._patterns)
            for candidate in candidates
        ]
        if extraction.listing_extractors:
            # Candidate records come first so they win link deduplication.
            records.extend(extract_listing_records(root, page_url))
        records = self._gate(records)

        used_fallback = False
        if not records and extraction.readability_fallback:
            used_fallback = True
            status = "fallback"
            fallback = extract_with_readability(html, page_url)
            metrics.record_fallback(url=page_url, status="success" if fallback else "empty")
            if fallback is not None and fallback.has_required_fields:
                records = [fallback]

        records = cap_records(records, extraction.max_items)
        if not records:
            status = "empty"

        page = PageExtraction(
            url=page_url,
            records=records,
            candidate_count=len(candidates),
            used_fallback=used_fallback,
        )
        stats = page.stats
        duration = time.perf_counter() - start_time
        metrics.record_page(
            url=page_url,
            candidate_count=len(candidates),
            complete_count=stats.complete_items,
            partial_count=len(records) - stats.complete_items,
            duration_seconds=duration,
            status=status,
        )
        logger.info(
            "Extracted %d records from %s (%d candidates, fallback=%s)",
            len(records),
            page_url,
            len(candidates),
            used_fallback,
            extra={
                "event": "page.extracted",
                "url": page_url,
                "records": len(records),
                "candidates": len(candidates),
                "used_fallback": used_fallback,
                "duration_seconds": duration,
            },
        )
        return page

    def _gate(self, records: List[ArticleRecord]) -> List[ArticleRecord]:
        extraction = self._settings.extraction
        kept = [record for record in records if record.has_required_fields]
        if extraction.strict_filtering:
            kept = filter_records(kept, extraction.min_title_length)
        return dedupe_by_link(kept)


class ExtractionRun:
    """Accumulate records across several pages, deduplicated by link and capped."""

    def __init__(self, max_items: int = 0) -> None:
        self._max_items = max_items
        self._seen_links: Set[str] = set()
        self.records: List[ArticleRecord] = []
        self.pages: List[PageExtraction] = []

    @property
    def is_full(self) -> bool:
        return self._max_items > 0 and len(self.records) >= self._max_items

    def add(self, page: PageExtraction) -> List[ArticleRecord]:
        """Add a page's records and return the ones that were new."""

        self.pages.append(page)
        fresh = dedupe_by_link(page.records, self._seen_links)
        if self._max_items > 0:
            fresh = fresh[: max(0, self._max_items - len(self.records))]
        self.records.extend(fresh)
        return fresh

    @property
    def stats(self) -> ExtractionStats:
        return ExtractionStats.from_records(self.records)


__all__ = [
    "ExtractionRun",
    "ExtractionStats",
    "NewsExtractionService",
    "PageExtraction",
    "cap_records",
    "dedupe_by_link",
]
