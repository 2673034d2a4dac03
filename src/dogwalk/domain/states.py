"""
Finite-state machines for bookings and payments.

Each table lists, for every status, the statuses it may move to. Anything
not listed is rejected with InvalidTransition. Terminal statuses map to an
empty set.

The ``advance_*`` helpers never mutate their argument: they return a copy
carrying the new status, so nothing reports a status that has not been
written yet.
"""

from dogwalk.domain.models import Booking, BookingStatus, Payment, PaymentStatus, utcnow
from dogwalk.errors import InvalidTransition

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.FAILED}),
    PaymentStatus.PROCESSING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


def can_transition_booking(current: BookingStatus, target: BookingStatus) -> bool:
    return target in BOOKING_TRANSITIONS[current]


def can_transition_payment(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in PAYMENT_TRANSITIONS[current]


def is_terminal_booking(status: BookingStatus) -> bool:
    return not BOOKING_TRANSITIONS[status]


def is_terminal_payment(status: PaymentStatus) -> bool:
    return not PAYMENT_TRANSITIONS[status]


def advance_booking(booking: Booking, target: BookingStatus, **changes) -> Booking:
    """Return a copy of ``booking`` moved to ``target``.

    Extra keyword arguments are applied to the copy as well (for example a
    cancellation reason). ``scheduled_at`` cannot be changed this way.
    """
    if not can_transition_booking(booking.status, target):
        raise InvalidTransition("booking", booking.status.value, target.value)
    if "scheduled_at" in changes:
        raise ValueError("scheduled_at is immutable")
    return booking.model_copy(update={**changes, "status": target, "updated_at": utcnow()})


def advance_payment(payment: Payment, target: PaymentStatus, **changes) -> Payment:
    """Return a copy of ``payment`` moved to ``target``."""
    if not can_transition_payment(payment.status, target):
        raise InvalidTransition("payment", payment.status.value, target.value)
    return payment.model_copy(update={**changes, "status": target, "updated_at": utcnow()})
