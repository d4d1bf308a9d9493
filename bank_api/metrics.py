"""
Prometheus metrics for the Bank API.

Tracks HTTP traffic, cache effectiveness and storage retries.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "bank_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "bank_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Cache metrics
cache_operations_total = Counter(
    "bank_cache_operations_total",
    "Cache lookups by key namespace and result",
    ["namespace", "result"],
)

# Storage metrics
storage_retries_total = Counter(
    "bank_storage_retries_total",
    "Retried storage operations by policy",
    ["policy"],
)

storage_failures_total = Counter(
    "bank_storage_failures_total",
    "Storage operations that exhausted their retry policy",
    ["policy"],
)


def record_cache_lookup(key: str, hit: bool) -> None:
    namespace = key.split(":", 1)[0]
    cache_operations_total.labels(namespace=namespace, result="hit" if hit else "miss").inc()


def metrics_response() -> Response:
    """Render all registered metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
