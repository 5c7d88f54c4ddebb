"""Prometheus metrics for page extraction runs."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


@dataclass
class PageEvent:
    url: str
    candidate_count: int
    record_count: int
    duration_seconds: float
    status: str


@dataclass
class FallbackEvent:
    url: str
    status: str


class MetricsCollector:
    """Centralised metrics registry for the extraction pipeline."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._exporter_started = False

        self._pages = Counter(
            "adaptive_news_pages_total",
            "Pages processed by extraction status",
            labelnames=("status",),
            registry=self._registry,
        )
        self._page_duration = Histogram(
            "adaptive_news_page_duration_seconds",
            "Duration of detection and extraction for one page",
            labelnames=("status",),
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
            registry=self._registry,
        )
        self._candidates = Counter(
            "adaptive_news_candidates_total",
            "Candidate elements proposed by the detector",
            registry=self._registry,
        )
        self._records = Counter(
            "adaptive_news_records_total",
            "Article records emitted after filtering",
            labelnames=("completeness",),
            registry=self._registry,
        )
        self._fallbacks = Counter(
            "adaptive_news_readability_fallbacks_total",
            "Readability fallback invocations by outcome",
            labelnames=("status",),
            registry=self._registry,
        )

        self.last_page: Optional[PageEvent] = None
        self.last_fallback: Optional[FallbackEvent] = None

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def enable_exporter(self, port: int) -> bool:
        """Start the Prometheus HTTP exporter for this collector's registry."""

        if self._exporter_started:
            return True
        start_http_server(port, registry=self._registry)
        self._exporter_started = True
        logger.info("Prometheus metrics exporter started", extra={"event": "metrics.started", "port": port})
        return True

    def record_page(
        self,
        *,
        url: str,
        candidate_count: int,
        complete_count: int,
        partial_count: int,
        duration_seconds: float,
        status: str,
    ) -> None:
        self.last_page = PageEvent(url, candidate_count, complete_count + partial_count, duration_seconds, status)
        self._pages.labels(status=status).inc()
        self._page_duration.labels(status=status).observe(duration_seconds)
        if candidate_count:
            self._candidates.inc(candidate_count)
        if complete_count:
            self._records.labels(completeness="complete").inc(complete_count)
        if partial_count:
            self._records.labels(completeness="partial").inc(partial_count)

    def record_fallback(self, *, url: str, status: str) -> None:
        self.last_fallback = FallbackEvent(url, status)
        self._fallbacks.labels(status=status).inc()

    def reset(self) -> None:
        """Reset cached inspection state (primarily for tests)."""

        self.last_page = None
        self.last_fallback = None


metrics = MetricsCollector()


def configure_metrics_from_env() -> None:
    """Start metrics exporter when ``ADAPTIVE_NEWS_METRICS_PORT`` is defined."""

    port_value = os.getenv("ADAPTIVE_NEWS_METRICS_PORT")
    if not port_value:
        return
    try:
        port = int(port_value)
    except ValueError:
        logger.warning(
            "Invalid ADAPTIVE_NEWS_METRICS_PORT value; expected integer",
            extra={"event": "metrics.invalid_port", "value": port_value},
        )
        return
    metrics.enable_exporter(port)


__all__ = ["configure_metrics_from_env", "metrics", "MetricsCollector", "PageEvent", "FallbackEvent"]
