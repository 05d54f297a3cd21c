"""API request/response schemas for order service endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    """Payload accepted by `POST /create-order`.

    `amount` is left untyped here; numeric validation belongs to the service so
    that every malformed value maps to `InvalidAmount` rather than a 422.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Any = Field(default=None, description="Price in major currency units, e.g. rupees")


class VerifyPaymentRequest(BaseModel):
    """Checkout widget callback relayed unmodified by the frontend."""

    model_config = ConfigDict(extra="ignore")

    razorpay_order_id: Any = None
    razorpay_payment_id: Any = None
    razorpay_signature: Any = None


class GatewayOrder(BaseModel):
    """Minimal shape every gateway order must have; extra gateway fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    amount: int = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    receipt: str | None = None


class VerificationResult(BaseModel):
    """Outcome of one signature check. Derived, never stored."""

    status: Literal["success", "failed"]
    reason: str | None = None
