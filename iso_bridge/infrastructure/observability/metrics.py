"""Prometheus metrics for monitoring conversion outcomes, risks, and validation failures"""

from typing import List

from prometheus_client import Counter, Histogram

from iso_bridge.domain.models import Risk

# Conversion metrics
conversion_counter = Counter(
    "iso_bridge_conversion_total",
    "Total legacy messages converted",
    ["format", "outcome"],  # outcome: valid | errors | rejected
)

conversion_duration_histogram = Histogram(
    "iso_bridge_conversion_duration_seconds",
    "End-to-end conversion time",
    ["format"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

risk_counter = Counter(
    "iso_bridge_risk_total",
    "Risks detected in converted messages",
    ["level"],  # Info | Warning | Critical
)

# Validation metrics
validation_failure_counter = Counter(
    "iso_bridge_validation_failures_total",
    "Generated or submitted XML that failed soft validation",
    ["message_type"],  # pacs.008 | pain.001
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_conversion(source_format: str, valid: bool, risks: List[Risk], duration_seconds: float) -> None:
    """Record conversion metrics for monitoring validity rates and risk distribution"""
    outcome = "valid" if valid else "errors"
    conversion_counter.labels(format=source_format, outcome=outcome).inc()
    conversion_duration_histogram.labels(format=source_format).observe(duration_seconds)

    for risk in risks:
        risk_counter.labels(level=risk.level.value).inc()


def record_rejection(source_format: str) -> None:
    """Record an input that could not be parsed at all"""
    conversion_counter.labels(format=source_format, outcome="rejected").inc()


def record_validation(message_type: str, valid: bool) -> None:
    """Count soft-validation failures per ISO 20022 message type"""
    if not valid:
        validation_failure_counter.labels(message_type=message_type).inc()
