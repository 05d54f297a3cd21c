"""Unit tests for checkout view guardrails and the pure transition function."""

import pytest

from coursepay.checkout.catalog import get_course
from coursepay.checkout.machine import (
    Back,
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
from coursepay.common.errors import InvalidTransition
from coursepay.common.state_machine import validate_transition

COURSE = get_course(2)
ORDER = {"id": "order_abc", "amount": 124900, "currency": "INR"}


def _paying() -> CheckoutState:
    return transition(CheckoutState(view="DETAILS", course=COURSE), PayRequested())


def test_valid_transition():
    """Sanity check: a legal transition should pass."""

    validate_transition("LIST", "DETAILS")


def test_invalid_transition():
    """Skipping straight to the success view must raise."""

    with pytest.raises(ValueError):
        validate_transition("LIST", "QR")


def test_select_moves_list_to_details():
    """Selecting a course opens its details."""

    state = transition(CheckoutState(), SelectCourse(course=COURSE))

    assert state.view == "DETAILS"
    assert state.course == COURSE
    assert state.error is None


def test_select_outside_list_is_rejected():
    """Courses can only be selected from the list."""

    with pytest.raises(InvalidTransition):
        transition(CheckoutState(view="DETAILS", course=COURSE), SelectCourse(course=COURSE))


def test_back_navigation():
    """Back walks details to list and is a no-op on the list."""

    details = CheckoutState(view="DETAILS", course=COURSE)
    qr = CheckoutState(view="QR", course=COURSE, order=ORDER)

    assert transition(details, Back()) == CheckoutState()
    assert transition(qr, Back()).view == "DETAILS"
    assert transition(qr, Back()).course == COURSE
    assert transition(CheckoutState(), Back()) == CheckoutState()


def test_back_is_not_allowed_while_paying():
    """Back is blocked while an order is in flight."""

    with pytest.raises(InvalidTransition):
        transition(_paying(), Back())


def test_pay_marks_busy_and_repeat_pay_is_suppressed():
    """Paying marks the session busy; a repeat pay changes nothing."""

    paying = _paying()

    assert paying.view == "PAYING"
    assert paying.busy
    assert transition(paying, PayRequested()) is paying


@pytest.mark.parametrize("state", [CheckoutState(), CheckoutState(view="QR", course=COURSE, order=ORDER)])
def test_pay_outside_details_is_rejected(state):
    """Pay is only legal from details."""

    with pytest.raises(InvalidTransition):
        transition(state, PayRequested())


def test_order_failure_returns_to_details_with_error():
    """A failed order returns to details with its reason."""

    state = transition(_paying(), OrderFailed(reason="Payment init failed"))

    assert state.view == "DETAILS"
    assert state.error == "Payment init failed"
    assert not state.busy


def test_verified_payment_reaches_qr():
    """Verification moves paying to the success view."""

    state = transition(transition(_paying(), OrderCreated(order=ORDER)), PaymentVerified())

    assert state.view == "QR"
    assert state.order == ORDER


def test_verified_without_order_is_rejected():
    """A verified event without an order is illegal."""

    with pytest.raises(InvalidTransition):
        transition(_paying(), PaymentVerified())


def test_rejected_payment_returns_to_details():
    """A rejected payment drops the order and shows the reason."""

    state = transition(transition(_paying(), OrderCreated(order=ORDER)), PaymentRejected(reason="Payment failed"))

    assert state.view == "DETAILS"
    assert state.error == "Payment failed"
    assert state.order is None


def test_dismiss_clears_busy_without_error():
    """Dismissal returns to details with no error."""

    state = transition(transition(_paying(), OrderCreated(order=ORDER)), PaymentDismissed())

    assert state.view == "DETAILS"
    assert state.error is None


@pytest.mark.parametrize(
    "event",
    [OrderCreated(order=ORDER), OrderFailed(reason="x"), PaymentVerified(), PaymentRejected(reason="x"), PaymentDismissed()],
)
def test_payment_events_require_paying(event):
    """Order and payment events are illegal outside paying."""

    with pytest.raises(InvalidTransition):
        transition(CheckoutState(view="DETAILS", course=COURSE), event)


def test_qr_has_no_forward_transition():
    """The success view is terminal apart from back."""

    qr = CheckoutState(view="QR", course=COURSE, order=ORDER)

    with pytest.raises(InvalidTransition):
        transition(qr, SelectCourse(course=COURSE))


def test_verification_marks_verifying_and_settles_on_result():
    """Verifying is held until the result lands, then cleared either way."""

    verifying = transition(transition(_paying(), OrderCreated(order=ORDER)), VerificationStarted())

    assert verifying.verifying
    assert verifying.view == "PAYING"
    assert not transition(verifying, PaymentVerified()).verifying
    assert not transition(verifying, PaymentRejected(reason="Payment failed")).verifying


def test_dismiss_while_verifying_keeps_paying():
    """Closing the widget after the callback fired must not drop the result."""

    verifying = transition(transition(_paying(), OrderCreated(order=ORDER)), VerificationStarted())

    state = transition(verifying, PaymentDismissed())

    assert state == verifying
    assert transition(state, PaymentVerified()).view == "QR"


@pytest.mark.parametrize("state", [_paying(), transition(transition(_paying(), OrderCreated(order=ORDER)), VerificationStarted())])
def test_verification_needs_an_order_and_starts_once(state):
    """No order yet, or already verifying: a second start is illegal."""

    with pytest.raises(InvalidTransition):
        transition(state, VerificationStarted())
