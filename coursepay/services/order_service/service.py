"""Order creation and payment signature verification.

The service is stateless: it holds the gateway client and the shared secret
and nothing else. It never records orders, so `verify_payment` cannot tell
whether an order id was minted here; the gateway is treated as the source of
truth for that.
"""

import hashlib
import hmac
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from opentelemetry import trace
from pydantic import SecretStr

from coursepay.common.errors import InvalidAmount, MissingFields, OrderCreationFailed
from coursepay.common.logging import logger, order_id_ctx
from coursepay.common.metrics import (
    gateway_latency_seconds,
    order_created_total,
    order_failure_total,
    order_requests_total,
    payment_verification_total,
)
from coursepay.common.tracing import get_tracer
from coursepay.services.order_service.gateway import PaymentGateway
from coursepay.services.order_service.schemas import VerificationResult


def to_minor_units(amount: Any) -> int:
    """Convert a major-unit amount (rupees) to minor units (paise).

    Accepts numbers and numeric strings. Anything missing, non-numeric,
    non-finite, non-positive or finer than one paisa is an `InvalidAmount`.
    """

    if amount is None or isinstance(amount, bool):
        raise InvalidAmount("amount missing")
    if isinstance(amount, str):
        amount = amount.strip()
        if not amount:
            raise InvalidAmount("amount missing")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmount("amount not numeric") from exc
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("amount not positive")
    minor = value * 100
    if minor != minor.to_integral_value():
        raise InvalidAmount("amount has fractional minor units")
    return int(minor)


def _present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


class OrderService:
    """Mints gateway orders and verifies checkout callbacks."""

    def __init__(
        self,
        gateway: PaymentGateway,
        key_secret: SecretStr | str,
        *,
        currency: str = "INR",
        receipt_prefix: str = "openroot",
        clock: Callable[[], float] = time.time,
        service_name: str = "order-service",
        tracer: trace.Tracer | None = None,
    ) -> None:
        if isinstance(key_secret, SecretStr):
            key_secret = key_secret.get_secret_value()
        self.gateway = gateway
        self._secret = key_secret.encode("utf-8")
        self.currency = currency
        self.receipt_prefix = receipt_prefix
        self.clock = clock
        self.service_name = service_name
        self.tracer = tracer or get_tracer()

    def make_receipt(self) -> str:
        # Millisecond timestamp; two orders in the same millisecond collide.
        return f"{self.receipt_prefix}_{int(self.clock() * 1000)}"

    async def create_order(self, amount: Any) -> dict[str, Any]:
        """Validate `amount` and mint one gateway order for it.

        The gateway's order object is returned as-is. Every gateway failure
        becomes `OrderCreationFailed`; there is no retry.
        """

        order_requests_total.labels(service=self.service_name).inc()
        try:
            minor_units = to_minor_units(amount)
        except InvalidAmount:
            order_failure_total.labels(service=self.service_name, reason="invalid_amount").inc()
            logger.info("order rejected: invalid amount")
            raise

        receipt = self.make_receipt()
        with self.tracer.start_as_current_span("gateway.create_order") as span:
            span.set_attribute("checkout.receipt", receipt)
            span.set_attribute("checkout.amount_minor_units", minor_units)
            try:
                with gateway_latency_seconds.labels(service=self.service_name).time():
                    order = await self.gateway.create_order(
                        amount=minor_units,
                        currency=self.currency,
                        receipt=receipt,
                    )
            except Exception as exc:
                gateway_status = getattr(exc, "gateway_status", None)
                if gateway_status is not None:
                    span.set_attribute("http.response.status_code", gateway_status)
                order_failure_total.labels(service=self.service_name, reason="gateway").inc()
                logger.exception(
                    "gateway order creation failed receipt=%s gateway_status=%s",
                    receipt,
                    gateway_status,
                )
                raise OrderCreationFailed("gateway order creation failed") from exc
            span.set_attribute("checkout.order_id", str(order.get("id", "")))

        order_id_ctx.set(str(order.get("id", "")))
        order_created_total.labels(service=self.service_name).inc()
        logger.info("order created receipt=%s amount=%s", receipt, minor_units)
        return order

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        """Hex HMAC-SHA256 of `order_id|payment_id` under the gateway secret."""

        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify_payment(self, order_id: Any, payment_id: Any, signature: Any) -> VerificationResult:
        """Check a checkout callback signature.

        Missing fields are reported before any HMAC work. A mismatch is a
        normal `failed` result, not an exception.
        """

        if not (_present(order_id) and _present(payment_id) and _present(signature)):
            payment_verification_total.labels(service=self.service_name, result="missing_fields").inc()
            raise MissingFields("verification callback incomplete")

        order_id_ctx.set(order_id)
        expected = self.expected_signature(order_id, payment_id)
        if hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            payment_verification_total.labels(service=self.service_name, result="success").inc()
            logger.info("payment verified payment_id=%s", payment_id)
            return VerificationResult(status="success")

        payment_verification_total.labels(service=self.service_name, result="failed").inc()
        logger.warning("payment signature mismatch payment_id=%s", payment_id)
        return VerificationResult(status="failed")
