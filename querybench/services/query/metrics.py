"""Prometheus metrics for the query load and accuracy loops."""

from __future__ import annotations

from prometheus_client import REGISTRY as global_registry, start_http_server

from querybench.foundation.common.metrics_factory import (
    get_or_create_counter,
    get_or_create_histogram,
)

fanout_requests_total = get_or_create_counter(
    "querybench_fanout_requests_total",
    "Total number of per-endpoint query requests issued by fanouts",
    ["mode", "result"],
    registry=global_registry,
)

fanout_latency_seconds = get_or_create_histogram(
    "querybench_fanout_latency_seconds",
    "Latency of individual endpoint query requests",
    ["mode"],
    registry=global_registry,
)

fanout_errors_total = get_or_create_counter(
    "querybench_fanout_errors_total",
    "Total number of failed fanouts by failure kind",
    ["kind"],
    registry=global_registry,
)

validation_total = get_or_create_counter(
    "querybench_validation_total",
    "Total number of accuracy validations by outcome",
    ["result"],
    registry=global_registry,
)

skipped_rounds_total = get_or_create_counter(
    "querybench_skipped_rounds_total",
    "Total number of loop iterations skipped because no hosts were known",
    ["loop"],
    registry=global_registry,
)


def observe_request(mode: str, result: str, latency_seconds: float) -> None:
    fanout_requests_total.labels(mode=mode, result=result).inc()
    fanout_latency_seconds.labels(mode=mode).observe(latency_seconds)


def start_metrics_server(port: int = 8000) -> None:
    """Start a background HTTP server to expose metrics."""
    start_http_server(port, registry=global_registry)


__all__ = [
    "fanout_requests_total",
    "fanout_latency_seconds",
    "fanout_errors_total",
    "validation_total",
    "skipped_rounds_total",
    "observe_request",
    "start_metrics_server",
]
