"""Field extraction from detected candidates."""

from .chain import FieldResult, calculate_confidence
from .extractor import ArticleRecord, extract_article, extract_with_readability
from .metadata import extract_metadata
from .urls import normalize_url

__all__ = [
    "ArticleRecord",
    "FieldResult",
    "calculate_confidence",
    "extract_article",
    "extract_metadata",
    "extract_with_readability",
    "normalize_url",
]
