"""
Optional OpenTelemetry tracing for the service and its backend calls.
"""

from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OTLP_ENDPOINT = "localhost:4317"


def configure_opentelemetry(
    service_name: str,
    service_version: str = "1.0.0",
    environment: str = "development",
    otlp_endpoint: Optional[str] = None,
    enable_tracing: bool = True,
) -> bool:
    """
    Install a global tracer provider exporting over OTLP/gRPC and instrument httpx.

    Args:
        service_name: Reported ``service.name``
        service_version: Reported ``service.version``
        environment: Reported ``deployment.environment``
        otlp_endpoint: Collector address (``localhost:4317`` when unset)
        enable_tracing: Do nothing when False

    Returns:
        True if tracing was configured
    """
    if not enable_tracing:
        return False

    endpoint = otlp_endpoint or DEFAULT_OTLP_ENDPOINT
    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: service_version,
            "deployment.environment": environment,
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
    )
    trace.set_tracer_provider(tracer_provider)

    # Backend calls made through ApiClient become child spans
    HTTPXClientInstrumentor().instrument()

    logger.info(
        "OpenTelemetry tracing enabled",
        extra={"extra_fields": {"otlp_endpoint": endpoint}},
    )
    return True


def instrument_fastapi(app: FastAPI, excluded_urls: str = "/health,/metrics") -> None:
    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=excluded_urls,
        tracer_provider=trace.get_tracer_provider(),
    )
