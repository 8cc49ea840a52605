"""
Prometheus metrics for the fleet admin service.

Tracks inbound HTTP requests and every call made to the fleet management
backend.
"""

from fastapi import Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)

# Inbound request metrics
http_requests_total = Counter(
    "fleet_admin_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "fleet_admin_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Backend API metrics
backend_requests_total = Counter(
    "fleet_admin_backend_requests_total",
    "Total requests sent to the fleet management backend",
    ["method", "endpoint", "status"],
)

backend_request_duration_seconds = Histogram(
    "fleet_admin_backend_request_duration_seconds",
    "Backend request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

backend_errors_total = Counter(
    "fleet_admin_backend_errors_total",
    "Total failed backend requests",
    ["endpoint", "error_type"],
)


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track inbound HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_backend_request(method: str, endpoint: str, status_code: int, duration: float):
    """Track a completed backend request."""
    backend_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    backend_request_duration_seconds.labels(
        method=method, endpoint=endpoint
    ).observe(duration)


def track_backend_error(endpoint: str, error_type: str):
    """Track a failed backend request."""
    backend_errors_total.labels(endpoint=endpoint, error_type=error_type).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
