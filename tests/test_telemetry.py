from __future__ import annotations

import io
import json
import logging

from adaptive_news.telemetry import MetricsCollector, StructuredFormatter, configure_logging


def test_structured_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="adaptive_news.pipeline",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Extracted %d records",
        args=(3,),
        exc_info=None,
    )
    record.event = "page.extracted"
    record.methods = {"heading", "anchor"}

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["message"] == "Extracted 3 records"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "adaptive_news.pipeline"
    assert payload["event"] == "page.extracted"
    assert payload["methods"] == ["anchor", "heading"]
    assert "msg" not in payload and "args" not in payload


def test_configure_logging_json_format(monkeypatch) -> None:
    monkeypatch.setenv("ADAPTIVE_NEWS_LOG_FORMAT", "json")
    stream = io.StringIO()
    root_logger = logging.getLogger()
    previous_handlers, previous_level = root_logger.handlers[:], root_logger.level
    try:
        configure_logging("debug", stream=stream)
        logging.getLogger("adaptive_news.test").debug("hello", extra={"event": "test.event"})
    finally:
        root_logger.handlers = previous_handlers
        root_logger.setLevel(previous_level)

    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "hello"
    assert payload["event"] == "test.event"


def test_record_page_updates_counters() -> None:
    collector = MetricsCollector()
    collector.record_page(
        url="https://news.example/",
        candidate_count=5,
        complete_count=2,
        partial_count=1,
        duration_seconds=0.02,
        status="success",
    )

    assert collector.last_page is not None
    assert collector.last_page.record_count == 3
    registry = collector.registry
    assert registry.get_sample_value("adaptive_news_pages_total", {"status": "success"}) == 1.0
    assert registry.get_sample_value("adaptive_news_candidates_total") == 5.0
    assert registry.get_sample_value("adaptive_news_records_total", {"completeness": "complete"}) == 2.0
    assert registry.get_sample_value("adaptive_news_records_total", {"completeness": "partial"}) == 1.0


def test_record_fallback_and_reset() -> None:
    collector = MetricsCollector()
    collector.record_fallback(url="https://news.example/", status="empty")

    assert collector.last_fallback.status == "empty"
    assert collector.registry.get_sample_value(
        "adaptive_news_readability_fallbacks_total", {"status": "empty"}
    ) == 1.0

    collector.reset()
    assert collector.last_fallback is None
