"""Contract with the gateway's hosted checkout widget.

The widget is opaque: it is handed the order plus display options and either
calls `on_response` with the gateway callback fields or `on_dismiss` when the
buyer closes it. It may also do nothing at all.
"""

from typing import Any, Awaitable, Callable, Protocol

from pydantic import BaseModel, Field


class CheckoutTheme(BaseModel):
    color: str = "#7c3aed"


class CheckoutOptions(BaseModel):
    """Options object passed to the widget (Razorpay checkout.js shape)."""

    key: str
    amount: int
    currency: str
    name: str
    description: str
    order_id: str
    theme: CheckoutTheme = Field(default_factory=CheckoutTheme)


GatewayResponseHandler = Callable[[dict[str, Any]], Awaitable[Any]]
DismissHandler = Callable[[], Awaitable[Any]]


class CheckoutWidget(Protocol):
    def open(
        self,
        options: CheckoutOptions,
        on_response: GatewayResponseHandler,
        on_dismiss: DismissHandler,
    ) -> None:
        ...
