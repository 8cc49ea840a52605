"""
Middleware for inbound request logging, metrics and slow-request detection.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import clear_request_id, get_logger, set_request_id
from .metrics import track_request_metrics

logger = get_logger(__name__)


def route_label(request: Request) -> str:
    """Route template for metrics labels, so ids do not explode cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request and record it in the inbound HTTP metrics.

    The request ID is taken from ``X-Request-ID`` (or generated), stored in the
    logging context so that outbound backend calls forward it, and echoed on
    the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID")
        if request_id:
            set_request_id(request_id)
        else:
            request_id = set_request_id()

        start_time = time.perf_counter()
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "query_params": str(request.query_params),
                    "client_host": request.client.host if request.client else None,
                }
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} ({duration_ms:.2f}ms)",
                extra={"extra_fields": {"error": str(exc)}},
            )
            raise
        else:
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id
            track_request_metrics(
                request.method, route_label(request), response.status_code, duration
            )
            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"[{response.status_code}] ({duration * 1000:.2f}ms)",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": duration * 1000,
                    }
                },
            )
            return response
        finally:
            clear_request_id()


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """Warn about requests slower than ``slow_request_threshold_ms``."""

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} "
                f"took {duration_ms:.2f}ms (threshold: {self.slow_request_threshold_ms}ms)",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": duration_ms,
                        "threshold_ms": self.slow_request_threshold_ms,
                    }
                },
            )

        return response
