"""Ordered fallback chains shared by the per-field extractors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Pattern, Sequence

from lxml import html

from adaptive_news.detection.patterns import NewsPatterns

NO_METHOD = "none"


@dataclass(frozen=True)
class FieldResult:
    value: Optional[str]
    confidence: float
    method: str

    @classmethod
    def empty(cls) -> "FieldResult":
        return cls(value=None, confidence=0.0, method=NO_METHOD)


@dataclass(frozen=True)
class FieldContext:
    """Inputs every field strategy sees for one candidate element."""

    element: html.HtmlElement
    metadata: Mapping[str, Any]
    base_url: Optional[str]
    patterns: NewsPatterns

    def meta(self, key: str) -> Optional[str]:
        value = self.metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


Strategy = Callable[[FieldContext], Optional[FieldResult]]


@dataclass(frozen=True)
class ChainStep:
    """One strategy in a field chain.

    The step runs while no value has been found, or while the current
    confidence is below ``retry_below``. With ``prefer_higher`` its result only
    replaces the current one when strictly more confident; otherwise it
    replaces it outright.
    """

    strategy: Strategy
    retry_below: Optional[float] = None
    prefer_higher: bool = False

    def should_run(self, current: Optional[FieldResult]) -> bool:
        if current is None:
            return True
        return self.retry_below is not None and current.confidence < self.retry_below

    def accepts(self, current: Optional[FieldResult], result: FieldResult) -> bool:
        if current is None or not self.prefer_higher:
            return True
        return result.confidence > current.confidence


def calculate_confidence(
    value: Optional[str],
    base_confidence: float,
    *,
    min_length: Optional[int] = None,
    format: Optional[Pattern[str]] = None,
    source_reliability: Optional[float] = None,
) -> float:
    """Score an extracted value, penalising short or ill-formatted values, clamped to [0, 1]."""

    if not value:
        return 0.0
    score = base_confidence
    if min_length and len(value) < min_length:
        score *= 0.8
    if format is not None and not format.search(value):
        score *= 0.7
    if source_reliability:
        score *= source_reliability
    return max(0.0, min(1.0, score))


def run_chain(steps: Sequence[ChainStep], context: FieldContext) -> FieldResult:
    current: Optional[FieldResult] = None
    for step in steps:
        if not step.should_run(current):
            continue
        result = step.strategy(context)
        if result is None or not result.value:
            continue
        if step.accepts(current, result):
            current = result
    return current or FieldResult.empty()


__all__ = [
    "ChainStep",
    "FieldContext",
    "FieldResult",
    "NO_METHOD",
    "Strategy",
    "calculate_confidence",
    "run_chain",
]
