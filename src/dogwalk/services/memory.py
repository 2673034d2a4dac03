"""
In-memory persistence adapter.

Implements the Repository port with plain dicts. Every read and write
copies the model so callers can never mutate stored state by accident,
giving the same isolation a real database round-trip gives. Used by the worker
in development and throughout the test suite.
"""

import logging

from dogwalk.domain.models import Booking, Payment

logger = logging.getLogger(__name__)


class InMemoryRepository:
    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._payments: dict[str, Payment] = {}

    async def save_booking(self, booking: Booking) -> None:
        logger.debug("Saving booking %s (%s)", booking.id, booking.status.value)
        self._bookings[booking.id] = booking.model_copy(deep=True)

    async def save_payment(self, payment: Payment) -> None:
        logger.debug("Saving payment %s (%s)", payment.id, payment.status.value)
        self._payments[payment.id] = payment.model_copy(deep=True)

    async def find_booking(self, booking_id: str) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    async def find_bookings_by_owner(self, owner_id: str) -> list[Booking]:
        return [b.model_copy(deep=True) for b in self._bookings.values() if b.owner_id == owner_id]

    async def find_payment(self, payment_id: str) -> Payment | None:
        payment = self._payments.get(payment_id)
        return payment.model_copy(deep=True) if payment else None
