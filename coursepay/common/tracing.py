"""OpenTelemetry wiring for the order service.

Export is off when `TRACING_ENABLED=false`; `get_tracer` then hands out the
API's no-op tracer, so spans around gateway calls cost nothing in tests.
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from coursepay.common.config import settings

TRACER_NAME = "coursepay.order_service"


def setup_tracing(service_name: str) -> None:
    """Register an OTLP/HTTP tracer provider tagged with the service name and currency."""

    if not settings.tracing_enabled:
        return
    resource = Resource.create({"service.name": service_name, "checkout.currency": settings.currency})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)))
    trace.set_tracer_provider(provider)


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


def instrument_app(app: FastAPI) -> None:
    """Request spans for every route except metrics scrapes and health checks."""

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="metrics,healthz")
