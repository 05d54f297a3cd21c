"""Outbound client for the payment gateway's order API.

The order service depends only on the `PaymentGateway` protocol; the Razorpay
implementation below is wired in `main.py` and replaced by fakes in tests.
"""

from typing import Any, Protocol

import httpx
from pydantic import SecretStr, ValidationError

from coursepay.common.errors import GatewayError
from coursepay.services.order_service.schemas import GatewayOrder


class PaymentGateway(Protocol):
    """Anything that can mint an order at the gateway."""

    async def create_order(self, *, amount: int, currency: str, receipt: str) -> dict[str, Any]:
        ...


class RazorpayGateway:
    """Razorpay Orders API over HTTP basic auth."""

    def __init__(
        self,
        key_id: str,
        key_secret: SecretStr,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def create_order(self, *, amount: int, currency: str, receipt: str) -> dict[str, Any]:
        """POST /orders and return the gateway's order object untouched."""

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self._key_secret.get_secret_value()),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/orders",
                    json={"amount": amount, "currency": currency, "receipt": receipt},
                )
        except httpx.HTTPError as exc:
            raise GatewayError(f"gateway request failed: {type(exc).__name__}") from exc

        if resp.status_code >= 400:
            raise GatewayError(
                f"gateway rejected order status={resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            payload = resp.json()
            GatewayOrder.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise GatewayError("gateway returned a malformed order") from exc
        return payload
