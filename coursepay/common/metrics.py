"""Prometheus metric definitions for the order service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


order_requests_total = Counter("order_requests_total", "Total order creation requests", ["service"])
order_created_total = Counter("order_created_total", "Orders minted at the gateway", ["service"])
order_failure_total = Counter(
    "order_failure_total",
    "Order creation requests that did not produce an order",
    ["service", "reason"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "Latency of outbound gateway order creation calls",
    ["service"],
)
payment_verification_total = Counter(
    "payment_verification_total",
    "Payment signature verifications by outcome",
    ["service", "result"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
