"""Document-level metadata (OpenGraph, Twitter Card, meta tags, JSON-LD)."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

from adaptive_news.detection.dom import HtmlInput, clean_text, parse_document

logger = logging.getLogger(__name__)

MetadataMap = Dict[str, Any]

_JSONLD_DATE_KEYS = (("datePublished", "published_time"), ("dateModified", "modified_time"))


def _meta_pairs(root, attribute: str, prefix: str) -> Iterator[tuple[str, str]]:
    for element in root.xpath(f"//meta[starts-with(@{attribute}, '{prefix}')]"):
        name = element.get(attribute, "")[len(prefix):]
        content = element.get("content")
        if name and content:
            yield name, content


def _iter_jsonld_objects(value: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(value, list):
        for item in value:
            yield from _iter_jsonld_objects(item)
    elif isinstance(value, dict):
        yield value
        graph = value.get("@graph")
        if graph is not None:
            yield from _iter_jsonld_objects(graph)


def _parse_jsonld(root) -> List[Any]:
    blocks: List[Any] = []
    for script in root.xpath("//script[@type='application/ld+json']"):
        body = script.text or ""
        try:
            blocks.append(json.loads(body))
        except ValueError as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc, extra={"event": "metadata.jsonld_invalid"})
    return blocks


def extract_metadata(markup: HtmlInput) -> MetadataMap:
    """Collect head metadata into a flat mapping used as a fallback by field extractors.

    OpenGraph properties are stored both without the ``og:`` prefix (``title``)
    and with an ``og_`` prefix (``og_title``). Twitter cards become
    ``twitter_<name>``, ``article:*`` properties become ``article_<name>`` and
    fill ``<name>`` when it is still free. JSON-LD blocks are collected under
    ``jsonLd``; a malformed block is skipped without affecting the others.
    """

    root = parse_document(markup, strip_non_content=False)
    metadata: MetadataMap = {}
    if root is None:
        return metadata

    for name, content in _meta_pairs(root, "property", "og:"):
        metadata[name] = content
        metadata[f"og_{name.replace(':', '_')}"] = content

    for name, content in _meta_pairs(root, "name", "twitter:"):
        metadata[f"twitter_{name}"] = content

    for element in root.xpath("//meta[@name='description']"):
        content = element.get("content")
        if content:
            metadata["description"] = content

    for name, content in _meta_pairs(root, "property", "article:"):
        key = name.replace(":", "_")
        metadata[f"article_{key}"] = content
        metadata.setdefault(key, content)

    for element in root.xpath("//link[@rel='canonical'][@href]"):
        metadata.setdefault("canonical", element.get("href"))

    title_elements = root.xpath("//title")
    if title_elements:
        document_title = clean_text(title_elements[0])
        if document_title:
            metadata["document_title"] = document_title

    jsonld = _parse_jsonld(root)
    if jsonld:
        metadata["jsonLd"] = jsonld
        for obj in _iter_jsonld_objects(jsonld):
            for source_key, target_key in _JSONLD_DATE_KEYS:
                value = obj.get(source_key)
                if isinstance(value, str) and value.strip():
                    metadata.setdefault(target_key, value.strip())

    return metadata


__all__ = ["MetadataMap", "extract_metadata"]
