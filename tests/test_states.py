from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from dogwalk.domain.models import Booking, BookingStatus, Payment, PaymentStatus
from dogwalk.domain.states import (
    BOOKING_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    advance_booking,
    advance_payment,
    can_transition_booking,
    is_terminal_booking,
    is_terminal_payment,
)
from dogwalk.errors import InvalidTransition

WHEN = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def booking() -> Booking:
    return Booking(id="b-1", owner_id="o-1", walker_id="w-1", dog_ids=["d-1"], scheduled_at=WHEN)


@pytest.fixture
def payment() -> Payment:
    return Payment(id="p-1", amount=1500, payer_id="o-1", payee_id="w-1")


def test_tables_cover_every_status():
    assert set(BOOKING_TRANSITIONS) == set(BookingStatus)
    assert set(PAYMENT_TRANSITIONS) == set(PaymentStatus)


def test_terminal_states():
    assert {s for s in BookingStatus if is_terminal_booking(s)} == {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
    assert {s for s in PaymentStatus if is_terminal_payment(s)} == {PaymentStatus.FAILED, PaymentStatus.REFUNDED}


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED, True),
        (BookingStatus.PENDING, BookingStatus.IN_PROGRESS, False),
        (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, True),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED, False),
        (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED, True),
        (BookingStatus.COMPLETED, BookingStatus.CANCELLED, False),
        (BookingStatus.CANCELLED, BookingStatus.PENDING, False),
    ],
)
def test_booking_transition_table(current, target, allowed):
    assert can_transition_booking(current, target) is allowed


def test_advance_booking_returns_copy(booking):
    confirmed = advance_booking(booking, BookingStatus.CONFIRMED)
    assert confirmed.status is BookingStatus.CONFIRMED
    assert booking.status is BookingStatus.PENDING
    assert confirmed.updated_at >= booking.updated_at


def test_advance_booking_rejects_unknown_edge(booking):
    with pytest.raises(InvalidTransition) as exc_info:
        advance_booking(booking, BookingStatus.COMPLETED)
    assert exc_info.value.current == "pending"
    assert exc_info.value.target == "completed"


def test_advance_booking_applies_changes(booking):
    cancelled = advance_booking(booking, BookingStatus.CANCELLED, cancellation_reason="rain")
    assert cancelled.cancellation_reason == "rain"


def test_scheduled_at_is_immutable(booking):
    with pytest.raises(ValidationError):
        booking.scheduled_at = WHEN + timedelta(days=1)
    with pytest.raises(ValueError):
        advance_booking(booking, BookingStatus.CONFIRMED, scheduled_at=WHEN + timedelta(days=1))


def test_payment_moves_forward_only(payment):
    processing = advance_payment(payment, PaymentStatus.PROCESSING)
    completed = advance_payment(processing, PaymentStatus.COMPLETED)
    refunded = advance_payment(completed, PaymentStatus.REFUNDED)
    assert refunded.status is PaymentStatus.REFUNDED
    with pytest.raises(InvalidTransition):
        advance_payment(refunded, PaymentStatus.COMPLETED)
    with pytest.raises(InvalidTransition):
        advance_payment(processing, PaymentStatus.PENDING)


def test_failed_payment_cannot_be_refunded(payment):
    failed = advance_payment(payment, PaymentStatus.FAILED)
    with pytest.raises(InvalidTransition):
        advance_payment(failed, PaymentStatus.REFUNDED)
