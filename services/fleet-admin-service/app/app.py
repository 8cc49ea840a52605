"""
Fleet Admin Service - Main FastAPI Application.

Serves the aggregated views of the fleet management dashboards (supervisor and
inventory overviews, per-vehicle health and collection figures) on top of the
fleet management REST backend, plus health and Prometheus endpoints.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import analytics
from .api_client import api_client
from .concurrency import gather_with_fallback, with_fallback
from .config import settings
from .exceptions import (
    ApiRequestError,
    FleetAdminException,
    ServiceUnavailableException,
    ValidationException,
    error_message,
)
from .logging_config import get_logger, setup_logging
from .metrics import metrics_endpoint
from .middleware import PerformanceMonitoringMiddleware, RequestLoggingMiddleware
from .models import Page, VehicleDetailedInfo
from .resources import FleetAdminClient
from .tracing import configure_opentelemetry, instrument_fastapi

SERVICE_VERSION = "1.0.0"

setup_logging(
    log_level=settings.LOG_LEVEL,
    service_name=settings.SERVICE_NAME,
    use_json=settings.LOG_JSON,
)
logger = get_logger(__name__)

tracing_enabled = configure_opentelemetry(
    service_name=settings.SERVICE_NAME,
    service_version=SERVICE_VERSION,
    environment=settings.ENVIRONMENT,
    otlp_endpoint=settings.OTLP_ENDPOINT,
    enable_tracing=settings.ENABLE_TRACING,
)

fleet = FleetAdminClient(api_client)
START_TIME = time.time()

# Large enough to cover the whole collection in one request
OVERVIEW_PAGE_SIZE = 1000


def _results(data: Any) -> List[Any]:
    """Items of a list response, whether paginated or bare."""
    if isinstance(data, list):
        return data
    return Page.model_validate(data or {}).results


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log configuration and backend reachability on startup; close the client on shutdown."""
    logger.info("=" * 80)
    logger.info("Starting Fleet Admin Service")
    logger.info("=" * 80)
    logger.info(
        "Configuration loaded",
        extra={
            "extra_fields": {
                "service_name": settings.SERVICE_NAME,
                "environment": settings.ENVIRONMENT,
                "debug_mode": settings.DEBUG,
                "log_level": settings.LOG_LEVEL,
                "api_url": settings.API_URL,
                "request_timeout": settings.REQUEST_TIMEOUT,
                "tracing_enabled": tracing_enabled,
            }
        },
    )

    if await api_client.health_check():
        logger.info(
            "Backend API connectivity verified",
            extra={"extra_fields": {"api_url": settings.API_URL}},
        )
    else:
        logger.error(
            "Backend API is not responding",
            extra={
                "extra_fields": {
                    "api_url": settings.API_URL,
                    "impact": "Dashboard views will fail until the backend is reachable",
                }
            },
        )

    yield

    logger.info("Shutting down Fleet Admin Service")
    await api_client.close()
    logger.info("HTTP client closed")


app = FastAPI(
    title=settings.APP_NAME,
    description="Aggregated views over the fleet management backend",
    version=SERVICE_VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# First added is last executed
app.add_middleware(PerformanceMonitoringMiddleware, slow_request_threshold_ms=1000.0)
app.add_middleware(RequestLoggingMiddleware)

if tracing_enabled:
    instrument_fastapi(app)


@app.exception_handler(ApiRequestError)
async def api_request_error_handler(request: Request, exc: ApiRequestError) -> JSONResponse:
    """Relay backend HTTP errors with the backend's status code."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.user_message})


@app.exception_handler(ServiceUnavailableException)
async def service_unavailable_handler(
    request: Request, exc: ServiceUnavailableException
) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ValidationException)
async def validation_error_handler(request: Request, exc: ValidationException) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(FleetAdminException)
async def fleet_admin_error_handler(request: Request, exc: FleetAdminException) -> JSONResponse:
    logger.error(
        "Unhandled backend error",
        extra={"extra_fields": {"path": request.url.path, "error": exc.message}},
    )
    return JSONResponse(status_code=502, content={"detail": error_message(exc)})


@app.get(
    "/health",
    tags=["Health"],
    summary="Health check",
    description="Check service health and backend reachability",
)
async def health_check() -> JSONResponse:
    """
    Report service health.

    Returns 200 when the backend API answers its health probe and 503
    (``degraded``) otherwise.
    """
    start = time.perf_counter()
    backend_healthy = await api_client.health_check()

    content: Dict[str, Any] = {
        "status": "healthy" if backend_healthy else "degraded",
        "service": settings.SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.time() - START_TIME, 3),
        "version": SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "dependencies": {
            "backend_api": "healthy" if backend_healthy else "unhealthy",
        },
    }
    elapsed_ms = (time.perf_counter() - start) * 1000

    return JSONResponse(
        status_code=200 if backend_healthy else 503,
        content=content,
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Response-Time": f"{elapsed_ms:.2f}ms",
        },
    )


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()


@app.get("/api/overview/supervisor", tags=["Overview"])
async def supervisor_overview() -> Dict[str, Any]:
    """Dashboard stats, pending contracts and recent activity for the supervisor home page."""
    stats, pending_contracts, activities = await gather_with_fallback(
        fleet.dashboard.stats(),
        fleet.contracts.pending(),
        with_fallback(fleet.dashboard.activities(), {"activities": []}),
    )
    return {
        "stats": stats,
        "pending_contracts": pending_contracts,
        "recent_activities": (activities or {}).get("activities", []),
    }


@app.get("/api/overview/inventory", tags=["Overview"])
async def inventory_overview() -> Dict[str, Any]:
    (
        dashboard,
        low_stock_parts,
        stock_summary,
        status_overview,
        parts,
    ) = await gather_with_fallback(
        fleet.inventory.dashboard(),
        fleet.inventory.low_stock_parts(),
        fleet.inventory.parts_stock_summary(),
        with_fallback(fleet.vehicles.status_overview(), None),
        with_fallback(fleet.inventory.parts(page_size=OVERVIEW_PAGE_SIZE), []),
    )
    return {
        "metrics": dashboard,
        "low_stock_parts": low_stock_parts,
        "parts_stock_summary": stock_summary,
        "status_overview": status_overview,
        "stock_alerts": analytics.parts_stock_alerts(_results(parts)),
    }


@app.get("/api/overview/garage", tags=["Overview"])
async def garage_overview() -> Dict[str, Any]:
    """Job and equipment counts for the garage management home page."""
    job_cards, equipment, statistics = await gather_with_fallback(
        fleet.job_cards.list(page_size=OVERVIEW_PAGE_SIZE),
        with_fallback(fleet.inventory.equipment_list(), []),
        fleet.job_cards.statistics(),
    )
    summary = analytics.garage_summary(_results(job_cards), equipment or [])
    return {
        **summary,
        "pending_approval": (statistics or {}).get("pending_approval", 0),
    }


@app.get("/api/overview/suppliers", tags=["Overview"])
async def supplier_overview() -> Dict[str, Any]:
    """Active and inactive supplier counts alongside the backend's purchase statistics."""
    active, inactive, statistics = await gather_with_fallback(
        fleet.suppliers.list_paginated(page_size=OVERVIEW_PAGE_SIZE, is_active=True),
        fleet.suppliers.list_paginated(page_size=OVERVIEW_PAGE_SIZE, is_active=False),
        fleet.suppliers.statistics(),
    )
    # Records without an is_active field take the flag of the filter that matched them
    suppliers = [{"is_active": True, **record} for record in active["suppliers"]] + [
        {"is_active": False, **record} for record in inactive["suppliers"]
    ]
    return {"counts": analytics.supplier_counts(suppliers), "statistics": statistics}


@app.get("/api/vehicles/{vehicle_id}/health", tags=["Vehicles"])
async def vehicle_health(vehicle_id: int) -> Dict[str, Any]:
    """
    Health and cost analysis for one vehicle.

    Maintenance and stock usage fall back to empty lists so that a vehicle
    without history still gets a score.
    """
    detailed, maintenance, stock_usage = await gather_with_fallback(
        fleet.inventory.detailed_info(vehicle_id),
        with_fallback(fleet.finance.maintenance_for_vehicle(vehicle_id), []),
        with_fallback(fleet.inventory.stock_usage_by_vehicle(vehicle_id), []),
    )
    info = VehicleDetailedInfo.model_validate(detailed or {})
    maintenance = maintenance or []
    stock_usage = stock_usage or []

    score = analytics.health_score(info.vehicle_info.condition, maintenance)
    costs = analytics.vehicle_cost_totals(maintenance, stock_usage)
    revenue = info.analytics.total_revenue or 0.0

    return {
        "vehicle_id": vehicle_id,
        "condition": info.vehicle_info.condition,
        "health_score": score,
        "health_label": analytics.health_label(score),
        "utilization_rate": info.analytics.utilization_rate or 0.0,
        "total_revenue": revenue,
        **costs,
        "profit_margin": analytics.profit_margin(revenue, costs["total_cost"]),
    }


@app.get("/api/vehicles/{vehicle_id}/collection", tags=["Vehicles"])
async def vehicle_collection(vehicle_id: int) -> Dict[str, Any]:
    """Deposits, payments and collection rate across the vehicle's contracts."""
    contracts, payments, income = await gather_with_fallback(
        fleet.contracts.for_vehicle(vehicle_id),
        fleet.finance.vehicle_payments(vehicle_id),
        with_fallback(fleet.vehicles.income_totals(vehicle_id), None),
    )
    figures = analytics.vehicle_collection_rate(contracts or [], payments or [], income)
    return {"vehicle_id": vehicle_id, **figures}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
