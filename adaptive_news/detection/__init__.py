"""Candidate detection for news items in arbitrary HTML."""

from .detector import Candidate, DetectionMethod, combine_results, detect_candidates
from .patterns import DEFAULT_PATTERNS, NewsPatterns, find_date_in_text, is_likely_date

__all__ = [
    "Candidate",
    "DEFAULT_PATTERNS",
    "DetectionMethod",
    "NewsPatterns",
    "combine_results",
    "detect_candidates",
    "find_date_in_text",
    "is_likely_date",
]
