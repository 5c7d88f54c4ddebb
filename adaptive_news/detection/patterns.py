"""Shared regular expressions for spotting news markup and date strings."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

_MONTHS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"

_NUMERIC_DMY = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"
_NUMERIC_YMD = r"\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}"
_DAY_MONTH_YEAR = rf"\b\d{{1,2}}\s+{_MONTHS}\s+\d{{2,4}}\b"
_MONTH_DAY_YEAR = rf"\b{_MONTHS}\s+\d{{1,2}},?\s+\d{{2,4}}\b"
_MONTH_DAY = rf"\b{_MONTHS}\s+\d{{1,2}}\b"
_DAY_MONTH = rf"\b\d{{1,2}}\s+{_MONTHS}\b"
_RELATIVE_DAY = r"\b(?:yesterday|today|tomorrow)\b"
_TIME_AGO = r"\b\d+\s+(?:hour|day|week|month|year)s?\s+ago\b"


def _compile(*sources: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


@dataclass(frozen=True)
class NewsPatterns:
    """Compiled class/ID and date patterns used by detection and extraction."""

    article: Pattern[str]
    title: Pattern[str]
    date: Pattern[str]
    summary: Pattern[str]
    article_boost: Pattern[str]
    date_like: Tuple[Pattern[str], ...]
    date_search: Tuple[Pattern[str], ...]

    def is_likely_date(self, text: Optional[str]) -> bool:
        if not text:
            return False
        return any(pattern.search(text) for pattern in self.date_like)

    def find_date_in_text(self, text: Optional[str]) -> Optional[str]:
        """Return the first recognisable date substring, checked pattern by pattern."""

        if not text:
            return None
        for pattern in self.date_search:
            match = pattern.search(text)
            if match:
                return match.group(0)
        return None


def build_patterns() -> NewsPatterns:
    return NewsPatterns(
        article=re.compile(r"\b(article|post|entry|story|news-item|content-item)\b", re.IGNORECASE),
        title=re.compile(r"\b(title|headline|heading|header|h-title)\b", re.IGNORECASE),
        date=re.compile(
            r"\b(date|time|published|posted|timestamp|datetime|pub-date|post-date)\b",
            re.IGNORECASE,
        ),
        summary=re.compile(
            r"\b(summary|excerpt|description|desc|teaser|intro|blurb|snippet|standfirst)\b",
            re.IGNORECASE,
        ),
        article_boost=re.compile(r"\b(article|news-item)\b", re.IGNORECASE),
        date_like=_compile(
            _NUMERIC_DMY,
            _NUMERIC_YMD,
            _DAY_MONTH_YEAR,
            _MONTH_DAY_YEAR,
            _MONTH_DAY,
            _DAY_MONTH,
            _RELATIVE_DAY,
            _TIME_AGO,
        ),
        date_search=_compile(
            rf"\b{_NUMERIC_DMY}\b",
            rf"\b{_NUMERIC_YMD}\b",
            _DAY_MONTH_YEAR,
            _MONTH_DAY_YEAR,
            _RELATIVE_DAY,
            _TIME_AGO,
        ),
    )


DEFAULT_PATTERNS = build_patterns()


def is_likely_date(text: Optional[str], patterns: NewsPatterns = DEFAULT_PATTERNS) -> bool:
    return patterns.is_likely_date(text)


def find_date_in_text(text: Optional[str], patterns: NewsPatterns = DEFAULT_PATTERNS) -> Optional[str]:
    return patterns.find_date_in_text(text)


__all__ = [
    "DEFAULT_PATTERNS",
    "NewsPatterns",
    "build_patterns",
    "find_date_in_text",
    "is_likely_date",
]
