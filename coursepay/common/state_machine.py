"""Checkout view transitions enforced by the checkout state machine."""

from coursepay.common.errors import InvalidTransition

LIST = "LIST"
DETAILS = "DETAILS"
PAYING = "PAYING"
QR = "QR"

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    LIST: {DETAILS},
    DETAILS: {LIST, PAYING},
    PAYING: {DETAILS, QR},
    QR: {DETAILS},
}


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Invalid transition: {current} -> {new}")
