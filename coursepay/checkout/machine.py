"""Checkout state and the pure transition function that moves it.

States are immutable snapshots; events are small tagged models. `transition`
does no I/O, so the whole checkout flow is testable without a UI or network.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from coursepay.checkout.catalog import Course
from coursepay.common.errors import InvalidTransition
from coursepay.common.state_machine import DETAILS, LIST, PAYING, QR, validate_transition


class CheckoutState(BaseModel):
    """Snapshot of one buyer's checkout."""

    model_config = ConfigDict(frozen=True)

    view: Literal["LIST", "DETAILS", "PAYING", "QR"] = LIST
    course: Course | None = None
    order: dict[str, Any] | None = None
    error: str | None = None
    verifying: bool = False

    @property
    def busy(self) -> bool:
        """True while an order is being created or paid for."""

        return self.view == PAYING


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class SelectCourse(_Event):
    kind: Literal["select"] = "select"
    course: Course


class Back(_Event):
    kind: Literal["back"] = "back"


class PayRequested(_Event):
    kind: Literal["pay"] = "pay"


class OrderCreated(_Event):
    kind: Literal["order_created"] = "order_created"
    order: dict[str, Any]


class OrderFailed(_Event):
    kind: Literal["order_failed"] = "order_failed"
    reason: str


class VerificationStarted(_Event):
    kind: Literal["verification_started"] = "verification_started"


class PaymentVerified(_Event):
    kind: Literal["payment_verified"] = "payment_verified"


class PaymentRejected(_Event):
    kind: Literal["payment_rejected"] = "payment_rejected"
    reason: str


class PaymentDismissed(_Event):
    kind: Literal["payment_dismissed"] = "payment_dismissed"


CheckoutEvent = Union[
    SelectCourse,
    Back,
    PayRequested,
    OrderCreated,
    OrderFailed,
    VerificationStarted,
    PaymentVerified,
    PaymentRejected,
    PaymentDismissed,
]


def _require_paying(state: CheckoutState, event: _Event) -> None:
    if state.view != PAYING:
        raise InvalidTransition(f"Invalid event {event.kind} in {state.view}")


def transition(state: CheckoutState, event: CheckoutEvent) -> CheckoutState:
    """Return the state that follows `event`; raise `InvalidTransition` if illegal."""

    if isinstance(event, SelectCourse):
        validate_transition(state.view, DETAILS)
        return CheckoutState(view=DETAILS, course=event.course)

    if isinstance(event, Back):
        if state.view == LIST:
            return state
        if state.view == QR:
            validate_transition(state.view, DETAILS)
            return state.model_copy(update={"view": DETAILS, "order": None, "error": None})
        validate_transition(state.view, LIST)
        return CheckoutState()

    if isinstance(event, PayRequested):
        # Double submission while an order is in flight is dropped, not an error.
        if state.busy:
            return state
        validate_transition(state.view, PAYING)
        if state.course is None:
            raise InvalidTransition("Invalid event pay without a course")
        return state.model_copy(update={"view": PAYING, "order": None, "error": None})

    if isinstance(event, OrderCreated):
        _require_paying(state, event)
        return state.model_copy(update={"order": event.order})

    if isinstance(event, (OrderFailed, PaymentRejected)):
        _require_paying(state, event)
        return state.model_copy(update={"view": DETAILS, "order": None, "error": event.reason, "verifying": False})

    if isinstance(event, VerificationStarted):
        _require_paying(state, event)
        if state.order is None or state.verifying:
            raise InvalidTransition("Invalid event verification_started")
        return state.model_copy(update={"verifying": True})

    if isinstance(event, PaymentVerified):
        _require_paying(state, event)
        if state.order is None:
            raise InvalidTransition("Invalid event payment_verified without an order")
        validate_transition(state.view, QR)
        return state.model_copy(update={"view": QR, "error": None, "verifying": False})

    if isinstance(event, PaymentDismissed):
        _require_paying(state, event)
        # The widget can close after the callback fired; the result still lands.
        if state.verifying:
            return state
        return state.model_copy(update={"view": DETAILS, "order": None, "error": None})

    raise InvalidTransition(f"Unknown checkout event {event!r}")
