"""
Booking lifecycle manager: owns the booking state machine.

Execution flow of ``create_booking``:
    1. Build the booking and its derived payment, validate both
       (InvalidBooking / InvalidPayment, nothing written)
    2. Persist the booking as pending
    3. Hand the payment to the PaymentOrchestrator (one attempt)
    4. pending → confirmed on a completed payment, → cancelled otherwise;
       persist, then notify the owner

A retried ``create_booking`` with the same request picks up a booking left
pending at step 3 instead of rejecting its id.

Walk events (``start_walk`` / ``finish_walk``) come from outside the core
and move confirmed → in_progress → completed. ``cancel_booking`` refunds a
completed payment before the cancelled status is written.

Operations on one booking id are serialized; different bookings proceed
in parallel. Notification failures are logged and never undo a transition.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from dogwalk.domain.models import (
    Booking,
    BookingRequest,
    BookingStatus,
    Notification,
    NotificationEvent,
    Payment,
    PaymentStatus,
    new_id,
    utcnow,
)
from dogwalk.domain.pricing import PricingStrategy, StandardPricingStrategy
from dogwalk.domain.states import advance_booking, is_terminal_booking
from dogwalk.domain.validation import validate_booking, validate_payment
from dogwalk.errors import BookingNotFound, InvalidBooking, InvalidTransition
from dogwalk.locks import KeyedLock
from dogwalk.orchestrator import PaymentOrchestrator
from dogwalk.ports import Notifier, Repository

logger = logging.getLogger(__name__)


class BookingLifecycleManager:
    def __init__(
        self,
        repository: Repository,
        orchestrator: PaymentOrchestrator,
        notifier: Notifier,
        pricing: PricingStrategy | None = None,
        currency: str = "USD",
        payment_timeout: float | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self.repository = repository
        self.orchestrator = orchestrator
        self.notifier = notifier
        # Strategy pattern: swap in a different pricing strategy if needed.
        self.pricing: PricingStrategy = pricing or StandardPricingStrategy()
        self.currency = currency
        self.payment_timeout = payment_timeout
        self.locks = locks or KeyedLock()

    # ── Create ───────────────────────────────────────────────────

    async def create_booking(self, request: BookingRequest, now: datetime | None = None) -> Booking:
        """Create, pay for and settle a booking.

        Returns the booking in its final state: confirmed when the payment
        completed, cancelled when it failed. Never returns a pending booking.

        Repeating the same request for a booking id that already exists
        (a retried activity) resumes a booking left pending and returns a
        settled one unchanged. A different request reusing the id is
        rejected with InvalidBooking.
        """
        now = now or utcnow()
        booking = Booking(
            id=request.booking_id,
            owner_id=request.owner_id,
            walker_id=request.walker_id,
            dog_ids=list(request.dog_ids),
            scheduled_at=request.scheduled_at,
            duration_minutes=request.duration_minutes,
            amount=self.pricing.price_cents(request),
            currency=self.currency,
            payment_id=new_id(),
            created_at=now,
            updated_at=now,
        )
        payment = self._payment_for(booking, now)
        validate_booking(booking, now=now).raise_for_errors()
        validate_payment(payment).raise_for_errors()

        async with self.locks.hold(booking.id):
            existing = await self.repository.find_booking(booking.id)
            if existing is None:
                await self.repository.save_booking(booking)
                logger.info(
                    "Booking %s pending for owner %s (%d %s)",
                    booking.id, booking.owner_id, booking.amount, booking.currency,
                )
            elif not _same_request(existing, booking):
                raise InvalidBooking([f"booking {booking.id} already exists"])
            elif existing.status is not BookingStatus.PENDING:
                logger.info("Booking %s already %s", existing.id, existing.status.value)
                return existing
            else:
                logger.info("Resuming pending booking %s", existing.id)
                booking = existing
                payment = self._payment_for(existing, now)

            payment = await self.orchestrator.process(payment, timeout=self.payment_timeout)

            if payment.status is PaymentStatus.COMPLETED:
                booking = advance_booking(booking, BookingStatus.CONFIRMED)
                event = Notification(
                    event=NotificationEvent.BOOKING_CONFIRMED,
                    booking_id=booking.id,
                    message=f"Your walk on {booking.scheduled_at:%Y-%m-%d %H:%M} is confirmed",
                )
            else:
                booking = advance_booking(
                    booking,
                    BookingStatus.CANCELLED,
                    cancellation_reason=f"payment_failed: {payment.failure_reason or 'unknown'}",
                )
                event = Notification(
                    event=NotificationEvent.BOOKING_CANCELLED,
                    booking_id=booking.id,
                    message="Your booking was cancelled because the payment failed",
                )
            await self.repository.save_booking(booking)

        logger.info("Booking %s %s", booking.id, booking.status.value)
        await self._notify(booking.owner_id, event)
        return booking

    # ── Read ─────────────────────────────────────────────────────

    async def fetch_bookings(self, owner_id: str) -> list[Booking]:
        """All of an owner's bookings, latest scheduled first."""
        bookings: Sequence[Booking] = await self.repository.find_bookings_by_owner(owner_id)
        return sorted(bookings, key=lambda b: b.scheduled_at, reverse=True)

    async def get_booking(self, booking_id: str) -> Booking:
        booking = await self.repository.find_booking(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    # ── Transitions ──────────────────────────────────────────────

    async def cancel_booking(self, booking_id: str, reason: str | None = None) -> Booking:
        """Cancel a non-terminal booking, refunding a completed payment first."""
        async with self.locks.hold(booking_id):
            booking = await self.get_booking(booking_id)
            if is_terminal_booking(booking.status):
                raise InvalidTransition("booking", booking.status.value, BookingStatus.CANCELLED.value)

            refunded = False
            if booking.payment_id:
                payment = await self.repository.find_payment(booking.payment_id)
                if payment is not None and payment.status is PaymentStatus.COMPLETED:
                    await self.orchestrator.refund(payment.id, timeout=self.payment_timeout)
                    refunded = True

            booking = advance_booking(booking, BookingStatus.CANCELLED, cancellation_reason=reason or "cancelled")
            await self.repository.save_booking(booking)

        logger.info("Booking %s cancelled (refunded=%s)", booking_id, refunded)
        await self._notify(
            booking.owner_id,
            Notification(
                event=NotificationEvent.BOOKING_CANCELLED,
                booking_id=booking_id,
                message="Your booking was cancelled and refunded" if refunded else "Your booking was cancelled",
            ),
        )
        return booking

    async def start_walk(self, booking_id: str) -> Booking:
        return await self._advance(booking_id, BookingStatus.IN_PROGRESS, NotificationEvent.WALK_STARTED)

    async def finish_walk(self, booking_id: str) -> Booking:
        return await self._advance(booking_id, BookingStatus.COMPLETED, NotificationEvent.WALK_COMPLETED)

    # ── Helpers ──────────────────────────────────────────────────

    async def _advance(self, booking_id: str, target: BookingStatus, event: NotificationEvent) -> Booking:
        async with self.locks.hold(booking_id):
            booking = advance_booking(await self.get_booking(booking_id), target)
            await self.repository.save_booking(booking)
        logger.info("Booking %s %s", booking_id, target.value)
        await self._notify(booking.owner_id, Notification(event=event, booking_id=booking_id))
        return booking

    async def _notify(self, user_id: str, event: Notification) -> None:
        try:
            await self.notifier.notify(user_id, event)
        except Exception:
            logger.warning("Notification %s for booking %s failed", event.event.value, event.booking_id, exc_info=True)

    def _payment_for(self, booking: Booking, now: datetime) -> Payment:
        return Payment(
            id=booking.payment_id,
            amount=booking.amount,
            currency=booking.currency,
            payer_id=booking.owner_id,
            payee_id=booking.walker_id,
            booking_id=booking.id,
            timestamp=now,
            updated_at=now,
        )


def _same_request(existing: Booking, booking: Booking) -> bool:
    return (
        existing.owner_id == booking.owner_id
        and existing.walker_id == booking.walker_id
        and existing.dog_ids == booking.dog_ids
        and existing.scheduled_at == booking.scheduled_at
        and existing.duration_minutes == booking.duration_minutes
    )
