"""Static page download for command-line runs."""
from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a page cannot be downloaded."""


class PageFetcher:
    """Download already-rendered HTML; no script execution or crawling."""

    def __init__(self, timeout: int = 10, user_agent: str = "AdaptiveNewsBot/0.1") -> None:
        self._timeout = timeout
        self._headers = {"User-Agent": user_agent}

    def fetch(self, url: str) -> str:
        """Return the body of ``url`` as text."""
        try:
            response = requests.get(url, timeout=self._timeout, headers=self._headers)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning(
                "Failed to download page %s: %s",
                url,
                exc,
                extra={"event": "fetch.failed", "url": url},
            )
            raise FetchError(f"Failed to download {url}: {exc}") from exc
        return response.text


__all__ = ["FetchError", "PageFetcher"]
