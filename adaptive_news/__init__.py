"""Adaptive detection and extraction of news items from arbitrary HTML."""

from .detection import Candidate, DetectionMethod, detect_candidates
from .extraction import ArticleRecord, extract_article, extract_metadata, extract_with_readability

__all__ = [
    "ArticleRecord",
    "Candidate",
    "DetectionMethod",
    "detect_candidates",
    "extract_article",
    "extract_metadata",
    "extract_with_readability",
]
