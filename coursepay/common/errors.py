"""Error taxonomy shared by the order service and the checkout client.

Every error carries the HTTP status and the client-safe body it maps to, so
handlers at the HTTP boundary never need to look at exception messages.
"""

from typing import Any


class CheckoutError(Exception):
    """Base class for all expected checkout failures."""

    status_code: int = 500
    body: dict[str, Any] = {"error": "Internal server error"}

    def response_body(self) -> dict[str, Any]:
        return dict(self.body)


class InvalidAmount(CheckoutError):
    """Order amount is missing, non-numeric, or not positive."""

    status_code = 400
    body = {"error": "Invalid amount"}


class OrderCreationFailed(CheckoutError):
    """The gateway could not mint an order."""

    status_code = 500
    body = {"error": "Order creation failed"}


class MissingFields(CheckoutError):
    """A verification callback lacks one of its three fields."""

    status_code = 400
    body = {"status": "failed", "reason": "Missing fields"}


class SignatureMismatch(CheckoutError):
    """Callback signature does not match the expected HMAC."""

    status_code = 400
    body = {"status": "failed"}


class GatewayError(CheckoutError):
    """Transport or protocol failure talking to the payment gateway."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.gateway_status = status_code


class InvalidTransition(ValueError):
    """Checkout event not allowed in the current view."""
