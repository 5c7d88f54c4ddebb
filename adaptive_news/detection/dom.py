"""lxml helpers for walking parsed news pages."""
from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional, Tuple, Union

from lxml import etree, html

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
TITLE_HEADING_TAGS = ("h1", "h2", "h3")
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")

_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)

HtmlInput = Union[str, bytes, html.HtmlElement, None]


def strip_xml_declaration(markup: str) -> str:
    """Drop a leading ``<?xml ...?>`` declaration, which lxml rejects in unicode input."""

    return _XML_DECLARATION_RE.sub("", markup, count=1)


def parse_document(markup: HtmlInput, *, strip_non_content: bool = True) -> Optional[html.HtmlElement]:
    """Parse ``markup`` into an ``<html>`` root element.

    Already-parsed elements are returned untouched. Empty or unparsable input
    yields ``None`` instead of raising.
    """

    if markup is None:
        return None
    if isinstance(markup, html.HtmlElement):
        return markup
    if not markup.strip():
        return None
    if isinstance(markup, str):
        markup = strip_xml_declaration(markup)
    try:
        root = html.document_fromstring(markup)
    except (etree.ParserError, ValueError) as exc:
        logger.debug("Unable to parse HTML document: %s", exc, extra={"event": "dom.parse_failed"})
        return None
    if strip_non_content:
        etree.strip_elements(root, *NON_CONTENT_TAGS, with_tail=False)
    return root


def is_element(node: object) -> bool:
    return isinstance(getattr(node, "tag", None), str)


def tag_name(element: html.HtmlElement) -> str:
    return element.tag.lower()


def element_children(element: html.HtmlElement) -> List[html.HtmlElement]:
    return [child for child in element if is_element(child)]


def iter_descendants(element: html.HtmlElement, *tags: str) -> Iterator[html.HtmlElement]:
    """Yield element descendants in document order, optionally limited to ``tags``."""

    wanted = set(tags)
    for node in element.iterdescendants():
        if not is_element(node):
            continue
        if wanted and tag_name(node) not in wanted:
            continue
        yield node


def walk(root: html.HtmlElement, max_depth: Optional[int] = None) -> Iterator[Tuple[html.HtmlElement, int]]:
    """Depth-first walk yielding ``(element, depth)`` with the root at depth 0."""

    stack: List[Tuple[html.HtmlElement, int]] = [(root, 0)]
    while stack:
        element, depth = stack.pop()
        yield element, depth
        if max_depth is not None and depth >= max_depth:
            continue
        children = element_children(element)
        stack.extend((child, depth + 1) for child in reversed(children))


def has_descendant(element: html.HtmlElement, *tags: str) -> bool:
    return next(iter_descendants(element, *tags), None) is not None


def raw_text(element: html.HtmlElement) -> str:
    return element.text_content() or ""


def clean_text(element: html.HtmlElement) -> str:
    """Element text with whitespace runs collapsed to single spaces."""

    return " ".join(raw_text(element).split())


def attribute(element: html.HtmlElement, name: str) -> str:
    return element.get(name) or ""


def matches_pattern(element: html.HtmlElement, pattern) -> bool:
    return bool(pattern.search(attribute(element, "class")) or pattern.search(attribute(element, "id")))


def element_selector(element: html.HtmlElement) -> str:
    """Stable selector: ``tag#id`` when an id exists, else ``tag.cls1.cls2`` or bare ``tag``."""

    tag = tag_name(element)
    element_id = attribute(element, "id").strip()
    if element_id:
        return f"{tag}#{element_id}"
    classes = attribute(element, "class").split()
    if classes:
        return f"{tag}." + ".".join(classes)
    return tag


__all__ = [
    "HEADING_TAGS",
    "TITLE_HEADING_TAGS",
    "attribute",
    "clean_text",
    "element_children",
    "element_selector",
    "has_descendant",
    "is_element",
    "iter_descendants",
    "matches_pattern",
    "parse_document",
    "raw_text",
    "strip_xml_declaration",
    "tag_name",
    "walk",
]
