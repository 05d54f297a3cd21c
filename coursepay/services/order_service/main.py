"""HTTP surface for order creation and payment verification.

The app is stateless; the gateway secret is held only by `OrderService` and its gateway client.
"""

from time import perf_counter
from typing import Any
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from coursepay.common.config import settings
from coursepay.common.errors import CheckoutError, OrderCreationFailed, SignatureMismatch
from coursepay.common.logging import configure_logging, logger, order_id_ctx, request_id_ctx
from coursepay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from coursepay.common.startup import log_startup_config
from coursepay.common.tracing import instrument_app, setup_tracing
from coursepay.services.order_service.gateway import RazorpayGateway
from coursepay.services.order_service.schemas import CreateOrderRequest, VerifyPaymentRequest
from coursepay.services.order_service.service import OrderService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "port",
        "razorpay_key_id",
        "razorpay_key_secret",
        "razorpay_base_url",
        "currency",
        "gateway_timeout_seconds",
    ],
)
if not settings.razorpay_key_secret.get_secret_value():
    raise RuntimeError("RAZORPAY_KEY_SECRET must be set for the order service")
service = OrderService(
    RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
        timeout=settings.gateway_timeout_seconds,
    ),
    settings.razorpay_key_secret,
    currency=settings.currency,
    receipt_prefix=settings.receipt_prefix,
    service_name=settings.service_name,
)


def get_order_service() -> OrderService:
    """Dependency hook; tests override it with a service around a fake gateway."""

    return service


app = FastAPI(title="Course Checkout Order Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
instrument_app(app)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Tag the request with an id and record count + latency for every call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    request_id = request.headers.get("x-request-id") or str(uuid4())
    request_id_ctx.set(request_id)
    order_id_ctx.set("")
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["x-request-id"] = request_id
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(CheckoutError)
async def checkout_error_handler(_: Request, exc: CheckoutError) -> JSONResponse:
    """Map the error taxonomy to its fixed, client-safe response."""

    return JSONResponse(status_code=exc.status_code, content=exc.response_body())


UNEXPECTED_ERROR_BODIES: dict[str, dict[str, str]] = {
    "/create-order": {"error": "Order creation failed"},
    "/verify-payment": {"status": "error"},
}


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 with the endpoint's generic body; traceback stays in the logs."""

    logger.error("unexpected error path=%s", request.url.path, exc_info=exc)
    body = UNEXPECTED_ERROR_BODIES.get(request.url.path, {"error": "Internal server error"})
    return JSONResponse(status_code=500, content=body)


async def _json_object(request: Request) -> dict[str, Any]:
    """Request body as a dict; anything else counts as an empty body."""

    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@app.get("/", response_class=PlainTextResponse)
def liveness():
    """Plain-text liveness check."""

    return "Course checkout backend is running"


@app.get("/healthz")
def health():
    """Container health check endpoint."""

    return {"status": "OK"}


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.post("/create-order")
async def create_order(request: Request, order_service: OrderService = Depends(get_order_service)):
    """Mint a gateway order for `amount` rupees and relay it verbatim."""

    req = CreateOrderRequest.model_validate(await _json_object(request))
    try:
        return await order_service.create_order(req.amount)
    except CheckoutError:
        raise
    except Exception as exc:
        logger.exception("unexpected create-order error")
        raise OrderCreationFailed("unexpected create-order error") from exc


@app.post("/verify-payment")
async def verify_payment(request: Request, order_service: OrderService = Depends(get_order_service)):
    """Recompute the callback signature; 200 only when it matches."""

    req = VerifyPaymentRequest.model_validate(await _json_object(request))
    try:
        result = order_service.verify_payment(
            req.razorpay_order_id,
            req.razorpay_payment_id,
            req.razorpay_signature,
        )
    except CheckoutError:
        raise
    except Exception:
        logger.exception("unexpected verify-payment error")
        return JSONResponse(status_code=500, content={"status": "error"})

    if result.status != "success":
        raise SignatureMismatch("signature mismatch")
    return result.model_dump(exclude_none=True)


def run() -> None:
    """Console entrypoint: serve the app on the configured host/port."""

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
