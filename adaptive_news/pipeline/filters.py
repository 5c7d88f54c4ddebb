"""Post-extraction filtering that drops navigation and boilerplate records."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from adaptive_news.extraction.extractor import ArticleRecord

logger = logging.getLogger(__name__)

NAVIGATION_LINK_FRAGMENTS = (
    "/category/",
    "/tag/",
    "/author/",
    "/about/",
    "/contact/",
    "/privacy/",
    "/terms/",
    "/search",
    "/login",
    "/register",
    "/account",
    "/profile",
    "/settings",
    "/help",
    "/faq",
    "/support",
    "/feedback",
    "/subscribe",
    "/newsletter",
    "/rss",
    "/sitemap",
    "/advertise",
    "/careers",
    "/jobs",
)

GENERIC_TITLE_PHRASES = (
    "Home",
    "Latest News",
    "Breaking News",
    "Top Stories",
    "Menu",
    "Navigation",
    "Search",
    "Login",
    "Register",
    "Sign In",
    "Sign Up",
    "Subscribe",
    "Newsletter",
    "Cookie",
    "Privacy",
    "Terms of Use",
    "Terms and Conditions",
)

NON_TEXT_TITLE_FRAGMENTS = (".jpg", ".png", ".gif", ".webp", ".svg", "http", "www.", "<", ">", "```", "###")

SECTION_NAMES = frozenset(
    {
        "News",
        "Business",
        "Sports",
        "Entertainment",
        "Technology",
        "Politics",
        "Health",
        "Science",
        "World",
        "Local",
        "Opinion",
        "Lifestyle",
    }
)

MAX_TITLE_LENGTH = 200

_NUMERIC_TITLE_RE = re.compile(r"^(?:\d+|\d{1,2}/\d{1,2}/\d{2,4}|\d{1,2}-\d{1,2}-\d{2,4})$")
_LINK_DATE_RE = re.compile(r"\d{4}/\d{1,2}/\d{1,2}|\d{4}-\d{1,2}-\d{1,2}")


def rejection_reason(record: ArticleRecord, min_title_length: int = 20) -> str | None:
    """Return why ``record`` looks like navigation or boilerplate, or ``None`` to keep it."""

    title, link = record.title, record.link
    if not title or not link:
        return "missing_title_or_link"
    if any(fragment in link for fragment in NAVIGATION_LINK_FRAGMENTS):
        return "navigation_link"
    if len(title) < min_title_length:
        return "short_title"
    if len(title) > MAX_TITLE_LENGTH:
        return "long_title"
    if title.upper() == title and title.lower() != title:
        return "uppercase_title"
    if any(phrase in title for phrase in GENERIC_TITLE_PHRASES):
        return "generic_title"
    if any(fragment in title for fragment in NON_TEXT_TITLE_FRAGMENTS):
        return "non_text_title"
    if title.startswith(("/", "http", "www.")):
        return "path_title"
    if _NUMERIC_TITLE_RE.match(title):
        return "numeric_title"
    if title in SECTION_NAMES:
        return "section_title"

    has_date = bool(record.date)
    has_summary = bool(record.summary and len(record.summary) > 20)
    title_has_quotes = '"' in title or "'" in title
    link_has_date = bool(_LINK_DATE_RE.search(link))
    if not (has_date or has_summary or title_has_quotes or link_has_date):
        return "no_news_signal"
    return None


def filter_records(records: Iterable[ArticleRecord], min_title_length: int = 20) -> List[ArticleRecord]:
    kept: List[ArticleRecord] = []
    for record in records:
        reason = rejection_reason(record, min_title_length)
        if reason is None:
            kept.append(record)
            continue
        logger.debug(
            "Dropping record %r: %s",
            record.title,
            reason,
            extra={"event": "filter.rejected", "reason": reason, "link": record.link},
        )
    return kept


__all__ = ["filter_records", "rejection_reason"]
