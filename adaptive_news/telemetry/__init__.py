"""Telemetry helpers for the adaptive news extractor."""

from .logging import StructuredFormatter, configure_logging
from .metrics import MetricsCollector, configure_metrics_from_env, metrics

__all__ = ["MetricsCollector", "StructuredFormatter", "configure_logging", "configure_metrics_from_env", "metrics"]
