"""Candidate article detection built from independent heuristics.

Each strategy proposes DOM subtrees that may hold a single news item and
attaches a confidence score. ``combine_results`` merges the proposals keyed by
selector and ranks them, and ``detect_candidates`` runs the whole pass.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from lxml import html

from adaptive_news.detection.dom import (
    HEADING_TAGS,
    HtmlInput,
    element_children,
    element_selector,
    has_descendant,
    matches_pattern,
    parse_document,
    raw_text,
    tag_name,
    walk,
)
from adaptive_news.detection.patterns import DEFAULT_PATTERNS, NewsPatterns

logger = logging.getLogger(__name__)

STRUCTURE_CONTAINER_TAGS = {"div", "section", "main"}
HEURISTIC_TAGS = {"div", "section", "li"}


class DetectionMethod(str, Enum):
    SEMANTIC_HTML = "semanticHTML"
    CLASS_PATTERNS = "classPatterns"
    DOM_STRUCTURE = "domStructure"
    CONTENT_HEURISTICS = "contentHeuristics"
    READABILITY = "readability"


def clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass
class Candidate:
    """A DOM subtree proposed as a possible news item."""

    element: html.HtmlElement
    method: DetectionMethod
    confidence: float
    selector: str

    def __post_init__(self) -> None:
        # Additive scores carry float noise (0.7999999999999999) that would skew ties.
        self.confidence = round(clamp(self.confidence), 4)


def _candidate(element: html.HtmlElement, method: DetectionMethod, confidence: float) -> Candidate:
    return Candidate(element=element, method=method, confidence=confidence, selector=element_selector(element))


def _elements(root: html.HtmlElement, tags: Iterable[str]) -> List[html.HtmlElement]:
    wanted = set(tags)
    return [element for element, _ in walk(root) if tag_name(element) in wanted]


def detect_by_semantic_html(markup: HtmlInput) -> List[Candidate]:
    root = parse_document(markup)
    if root is None:
        return []

    results: List[Candidate] = []
    for element in _elements(root, ("article",)):
        results.append(_candidate(element, DetectionMethod.SEMANTIC_HTML, 0.9))

    main_scoped = root.xpath("//main//article | //*[@role='main']//article")
    for element in main_scoped:
        results.append(_candidate(element, DetectionMethod.SEMANTIC_HTML, 0.95))

    for element in _elements(root, ("section",)):
        if len(raw_text(element)) > 100:
            results.append(_candidate(element, DetectionMethod.SEMANTIC_HTML, 0.7))
    return results


def detect_by_class_patterns(
    markup: HtmlInput,
    patterns: NewsPatterns = DEFAULT_PATTERNS,
    max_depth: Optional[int] = None,
) -> List[Candidate]:
    root = parse_document(markup)
    if root is None:
        return []

    results: List[Candidate] = []
    for element, _depth in walk(root, max_depth):
        if not matches_pattern(element, patterns.article):
            continue
        confidence = 0.8
        if matches_pattern(element, patterns.article_boost):
            confidence = 0.85
        # Bare div wrappers are weak evidence on their own.
        if tag_name(element) == "div" and len(element_children(element)) < 2:
            confidence *= 0.7
        results.append(_candidate(element, DetectionMethod.CLASS_PATTERNS, confidence))
    return results


def element_signature(element: html.HtmlElement) -> str:
    """Label an element by which of heading/image/link/text it contains."""

    features = (
        ("heading", has_descendant(element, *HEADING_TAGS)),
        ("image", has_descendant(element, "img")),
        ("link", has_descendant(element, "a")),
        ("text", bool(raw_text(element).strip())),
    )
    return "-".join(label for label, present in features if present)


def detect_by_dom_structure(markup: HtmlInput) -> List[Candidate]:
    root = parse_document(markup)
    if root is None:
        return []

    results: List[Candidate] = []
    for parent in _elements(root, STRUCTURE_CONTAINER_TAGS):
        children = element_children(parent)
        if len(children) < 3:
            continue

        groups: Dict[str, List[html.HtmlElement]] = {}
        for child in children:
            groups.setdefault(element_signature(child), []).append(child)

        for signature, group in groups.items():
            if len(group) < 3 or "heading" not in signature:
                continue
            results.extend(_candidate(child, DetectionMethod.DOM_STRUCTURE, 0.75) for child in group)
    return results


def detect_by_content_heuristics(markup: HtmlInput) -> List[Candidate]:
    root = parse_document(markup)
    if root is None:
        return []

    results: List[Candidate] = []
    for element in _elements(root, HEURISTIC_TAGS):
        text = raw_text(element).strip()
        if len(text) < 50:
            continue

        confidence = 0.6
        if has_descendant(element, *HEADING_TAGS):
            confidence += 0.1
        if has_descendant(element, "img"):
            confidence += 0.1
        if has_descendant(element, "a"):
            confidence += 0.05
        if len(text) > 200:
            confidence += 0.05
        # Already covered by the semantic strategy.
        if has_descendant(element, "article"):
            confidence -= 0.2
        results.append(_candidate(element, DetectionMethod.CONTENT_HEURISTICS, confidence))
    return results


def combine_results(results: Iterable[Candidate]) -> List[Candidate]:
    """Keep the highest-confidence candidate per selector, ranked descending.

    Ties keep the earliest candidate, and equal confidences stay in first-seen
    selector order.
    """

    by_selector: Dict[str, Candidate] = {}
    for candidate in results:
        current = by_selector.get(candidate.selector)
        if current is None or current.confidence < candidate.confidence:
            by_selector[candidate.selector] = candidate
    return sorted(by_selector.values(), key=lambda candidate: candidate.confidence, reverse=True)


def detect_candidates(
    markup: HtmlInput,
    patterns: NewsPatterns = DEFAULT_PATTERNS,
    *,
    max_depth: Optional[int] = None,
    max_candidates: Optional[int] = None,
) -> List[Candidate]:
    """Run every detection strategy over one document and rank the merged result."""

    root = parse_document(markup)
    if root is None:
        logger.debug("No parsable document supplied for detection", extra={"event": "detection.empty_document"})
        return []

    proposals: List[Candidate] = []
    proposals.extend(detect_by_semantic_html(root))
    proposals.extend(detect_by_class_patterns(root, patterns, max_depth=max_depth))
    proposals.extend(detect_by_dom_structure(root))
    proposals.extend(detect_by_content_heuristics(root))

    ranked = combine_results(proposals)
    if max_candidates is not None:
        ranked = ranked[:max_candidates]
    logger.debug(
        "Detected %d candidates from %d proposals",
        len(ranked),
        len(proposals),
        extra={"event": "detection.completed", "candidates": len(ranked), "proposals": len(proposals)},
    )
    return ranked


__all__ = [
    "Candidate",
    "DetectionMethod",
    "combine_results",
    "detect_by_class_patterns",
    "detect_by_content_heuristics",
    "detect_by_dom_structure",
    "detect_by_semantic_html",
    "detect_candidates",
    "element_signature",
]
