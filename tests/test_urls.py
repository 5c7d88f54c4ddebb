from __future__ import annotations

import pytest

from adaptive_news.extraction.urls import normalize_url


def test_relative_href_resolves_against_base() -> None:
    assert normalize_url("/a/b", "https://x.com/c") == "https://x.com/a/b"
    assert normalize_url("d/e", "https://x.com/c/") == "https://x.com/c/d/e"


def test_absolute_href_is_kept() -> None:
    assert normalize_url("https://other.org/story", "https://x.com/") == "https://other.org/story"


@pytest.mark.parametrize(
    "href,base",
    [
        ("http://[invalid", "https://x.com/"),
        ("https://x.com:notaport/a", None),
        ("javascript:void(0)", "https://x.com/"),
        ("mailto:desk@x.com", "https://x.com/"),
        ("/relative/only", None),
        ("", "https://x.com/"),
        (None, "https://x.com/"),
    ],
)
def test_unusable_href_returns_none(href, base) -> None:
    assert normalize_url(href, base) is None
