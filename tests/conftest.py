"""Shared fixtures: test secret, fake gateway, service and HTTP clients."""

import hashlib
import hmac
import os

os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ["RAZORPAY_KEY_SECRET"] = "testsecret"
os.environ["TRACING_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from coursepay.services.order_service.main import app, get_order_service
from coursepay.services.order_service.service import OrderService

TEST_SECRET = "testsecret"
FIXED_NOW = 1_700_000_000.123


def sign(order_id: str, payment_id: str, secret: str = TEST_SECRET) -> str:
    """Signature the gateway would attach to a genuine callback."""

    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class FakeGateway:
    """In-memory gateway that records every order request."""

    def __init__(self, order: dict | None = None, error: Exception | None = None) -> None:
        self.order = order
        self.error = error
        self.calls: list[dict] = []

    async def create_order(self, *, amount: int, currency: str, receipt: str) -> dict:
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt})
        if self.error is not None:
            raise self.error
        if self.order is not None:
            return self.order
        return {
            "id": "order_abc",
            "entity": "order",
            "amount": amount,
            "amount_paid": 0,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def order_service(fake_gateway):
    return OrderService(fake_gateway, TEST_SECRET, clock=lambda: FIXED_NOW)


@pytest.fixture
def api_client(order_service):
    """TestClient whose order service talks to the fake gateway."""

    app.dependency_overrides[get_order_service] = lambda: order_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
