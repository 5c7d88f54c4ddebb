"""URL helpers for extracted links."""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def normalize_url(url: Optional[str], base_url: Optional[str]) -> Optional[str]:
    """Resolve ``url`` against ``base_url`` and return an absolute http(s) URL.

    Malformed input, unsupported schemes (``javascript:``, ``mailto:``) and
    relative results with no base to anchor them yield ``None``.
    """

    if not url or not url.strip():
        return None
    try:
        resolved = urljoin(base_url or "", url.strip())
        parts = urlsplit(resolved)
        _ = parts.port  # raises ValueError on a malformed port
    except ValueError as exc:
        logger.debug("Error normalizing URL %s: %s", url, exc, extra={"event": "url.invalid", "url": url})
        return None
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        return None
    return resolved


__all__ = ["normalize_url"]
