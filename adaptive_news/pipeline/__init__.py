"""Orchestration around the detection and extraction engine."""

from .fetcher import FetchError, PageFetcher
from .filters import filter_records, rejection_reason
from .listing import extract_listing_records
from .service import ExtractionRun, ExtractionStats, NewsExtractionService, PageExtraction

__all__ = [
    "ExtractionRun",
    "ExtractionStats",
    "FetchError",
    "NewsExtractionService",
    "PageExtraction",
    "PageFetcher",
    "extract_listing_records",
    "filter_records",
    "rejection_reason",
]
