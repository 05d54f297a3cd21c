"""Async driver that runs the checkout state machine against real collaborators.

`CheckoutSession` owns the current `CheckoutState` and performs the I/O the
pure transitions call for: order creation, opening the widget, and relaying
the widget callback for verification.
"""

from typing import Any, Callable

from coursepay.checkout.catalog import Course, get_course
from coursepay.checkout.client import OrderServiceClient, PaymentAttempt
from coursepay.checkout.machine import (
    Back,
    CheckoutEvent,
    CheckoutState,
    OrderCreated,
    OrderFailed,
    PaymentDismissed,
    PaymentRejected,
    PaymentVerified,
    PayRequested,
    SelectCourse,
    VerificationStarted,
    transition,
)
from coursepay.checkout.widget import CheckoutOptions, CheckoutTheme, CheckoutWidget
from coursepay.common.config import settings
from coursepay.common.logging import logger
from coursepay.common.state_machine import PAYING, QR

COURSE_NOT_FOUND = "Course not found"
PAYMENT_INIT_FAILED = "Payment init failed"
PAYMENT_FAILED = "Payment failed"


def _callback_field(response: dict[str, Any], name: str) -> str | None:
    # Non-string values are sent as missing; the service answers Missing fields.
    value = response.get(name)
    return value if isinstance(value, str) else None


class CheckoutSession:
    """One buyer's walk through list, details, paying and the success view."""

    def __init__(
        self,
        client: OrderServiceClient | None,
        widget: CheckoutWidget,
        *,
        key_id: str | None = None,
        merchant_name: str | None = None,
        theme_color: str | None = None,
        lookup: Callable[[int], Course | None] = get_course,
    ) -> None:
        self.client = client if client is not None else OrderServiceClient()
        self.widget = widget
        self.key_id = key_id if key_id is not None else settings.razorpay_key_id
        self.merchant_name = merchant_name or settings.checkout_merchant_name
        self.theme_color = theme_color or settings.checkout_theme_color
        self.lookup = lookup
        self._state = CheckoutState()

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def unlocked_content(self) -> str | None:
        """Content asset of the purchased course, available only in QR."""

        if self._state.view != QR or self._state.course is None:
            return None
        return self._state.course.unlock_asset

    def _apply(self, event: CheckoutEvent) -> CheckoutState:
        previous = self._state
        self._state = transition(previous, event)
        if previous.view != self._state.view:
            logger.info("checkout %s -> %s on %s", previous.view, self._state.view, event.kind)
        return self._state

    def select(self, course_id: int) -> CheckoutState:
        course = self.lookup(course_id)
        if course is None:
            logger.warning("checkout select unknown course_id=%s", course_id)
            self._state = self._state.model_copy(update={"error": COURSE_NOT_FOUND})
            return self._state
        return self._apply(SelectCourse(course=course))

    def back(self) -> CheckoutState:
        return self._apply(Back())

    def _options(self, course: Course, order: dict[str, Any]) -> CheckoutOptions:
        return CheckoutOptions(
            key=self.key_id,
            amount=order.get("amount", course.price_minor_units),
            currency=order.get("currency", "INR"),
            name=self.merchant_name,
            description=course.name,
            order_id=order["id"],
            theme=CheckoutTheme(color=self.theme_color),
        )

    async def pay(self) -> CheckoutState:
        """Create an order for the selected course and open the widget.

        The view flips to PAYING before the first await, so a second `pay()`
        issued while the first is pending is suppressed. Any failure before the
        widget is open sends the buyer back to DETAILS.
        """

        if self._state.busy:
            logger.info("checkout pay suppressed: payment already in flight")
            return self._state
        self._apply(PayRequested())
        course = self._state.course

        try:
            order = await self.client.create_order(course.price_major_units)
            self._apply(OrderCreated(order=order))
            self.widget.open(self._options(course, order), self.handle_gateway_response, self.dismiss)
        except Exception:
            logger.exception("checkout payment init failed")
            return self._apply(OrderFailed(reason=PAYMENT_INIT_FAILED))
        return self._state

    async def handle_gateway_response(self, response: dict[str, Any]) -> CheckoutState:
        """Forward the widget callback for verification and settle the attempt.

        Only the first callback for an order is verified; the outcome is
        applied only if the session is still paying for that same order.
        """

        state = self._state
        if state.view != PAYING or state.order is None:
            logger.warning("checkout gateway callback ignored in %s", state.view)
            return state
        if state.verifying:
            logger.warning("checkout duplicate gateway callback dropped")
            return state

        order_id = state.order["id"]
        if response.get("razorpay_order_id") not in (None, order_id):
            logger.warning("checkout callback order id differs from created order")
        attempt = PaymentAttempt(
            order_id=order_id,
            payment_id=_callback_field(response, "razorpay_payment_id"),
            signature=_callback_field(response, "razorpay_signature"),
        )
        self._apply(VerificationStarted())

        try:
            result = await self.client.verify_payment(attempt)
            paid = result.status == "success"
        except Exception:
            logger.exception("checkout verification failed")
            paid = False

        current = self._state
        if current.view != PAYING or current.order is None or current.order.get("id") != order_id:
            logger.warning("checkout verification result discarded in %s", current.view)
            return current
        if paid:
            return self._apply(PaymentVerified())
        return self._apply(PaymentRejected(reason=PAYMENT_FAILED))

    async def dismiss(self) -> CheckoutState:
        """Buyer closed the widget without paying; ignored while verifying."""

        if self._state.view != PAYING:
            return self._state
        return self._apply(PaymentDismissed())
