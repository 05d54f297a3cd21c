"""HTTP client the checkout flow uses to reach the order service."""

from typing import Any

import httpx
from pydantic import BaseModel

from coursepay.common.config import settings
from coursepay.common.errors import InvalidAmount, OrderCreationFailed
from coursepay.common.logging import logger
from coursepay.services.order_service.schemas import VerificationResult


class PaymentAttempt(BaseModel):
    """Callback fields for one verification round-trip. Held in memory only."""

    order_id: str | None = None
    payment_id: str | None = None
    signature: str | None = None

    def to_callback(self) -> dict[str, Any]:
        return {
            "razorpay_order_id": self.order_id,
            "razorpay_payment_id": self.payment_id,
            "razorpay_signature": self.signature,
        }


class OrderServiceClient:
    """Calls `/create-order` and `/verify-payment` with a per-request timeout.

    Base URL and timeout default to `ORDER_SERVICE_URL` and
    `ORDER_SERVICE_TIMEOUT_SECONDS`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.order_service_url
        self.timeout = timeout if timeout is not None else settings.order_service_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def create_order(self, amount: int | float) -> dict[str, Any]:
        """Ask the service for a gateway order; raise unless one with an `id` comes back."""

        try:
            async with self._client() as client:
                resp = await client.post("/create-order", json={"amount": amount})
        except httpx.HTTPError as exc:
            raise OrderCreationFailed(f"order service unreachable: {type(exc).__name__}") from exc

        if resp.status_code == 400:
            raise InvalidAmount("order service rejected amount")
        if resp.status_code >= 400:
            raise OrderCreationFailed(f"order service returned status={resp.status_code}")
        try:
            order = resp.json()
        except ValueError as exc:
            raise OrderCreationFailed("order service returned non-JSON body") from exc
        if not isinstance(order, dict) or not order.get("id"):
            raise OrderCreationFailed("order response without id")
        return order

    async def verify_payment(self, attempt: PaymentAttempt) -> VerificationResult:
        """Relay callback fields; only an explicit 200 `success` counts as paid."""

        try:
            async with self._client() as client:
                resp = await client.post("/verify-payment", json=attempt.to_callback())
        except httpx.HTTPError as exc:
            logger.warning("verify-payment unreachable error_type=%s", type(exc).__name__)
            return VerificationResult(status="failed", reason="Verification unavailable")

        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        if resp.status_code == 200 and payload.get("status") == "success":
            return VerificationResult(status="success")
        reason = payload.get("reason")
        return VerificationResult(status="failed", reason=reason if isinstance(reason, str) else None)
