"""
Temporal activities: thin wrappers delegating to the booking core.

An **activity** is where side-effects happen: persistence writes, gateway
calls, notifications. Activities run outside the deterministic workflow
sandbox, so they can read the clock and talk to the network freely.

Each activity accepts a single Pydantic model as input; the Temporal SDK
serializes it with pydantic_data_converter on dispatch and deserializes it
on the worker.

Domain errors propagate unchanged. Temporal records them under their class
name, which the workflow's RetryPolicy lists as non-retryable.
"""

import logging

from temporalio import activity

from dogwalk.domain.models import Booking, BookingAction, BookingRequest, OwnerQuery, Payment, PaymentRef
from dogwalk.services.factory import ServiceFactory

logger = logging.getLogger(__name__)


@activity.defn
async def create_booking(input: BookingRequest) -> Booking:
    """Validate, persist and pay for a booking; returns it confirmed or cancelled."""
    logger.info("Activity create_booking started for booking %s", input.booking_id)
    booking = await ServiceFactory.get_lifecycle_manager().create_booking(input)
    logger.info("Activity create_booking completed for booking %s (%s)", booking.id, booking.status.value)
    return booking


@activity.defn
async def cancel_booking(input: BookingAction) -> Booking:
    logger.info("Activity cancel_booking started for booking %s", input.booking_id)
    return await ServiceFactory.get_lifecycle_manager().cancel_booking(input.booking_id, input.reason)


@activity.defn
async def start_walk(input: BookingAction) -> Booking:
    logger.info("Activity start_walk started for booking %s", input.booking_id)
    return await ServiceFactory.get_lifecycle_manager().start_walk(input.booking_id)


@activity.defn
async def finish_walk(input: BookingAction) -> Booking:
    logger.info("Activity finish_walk started for booking %s", input.booking_id)
    return await ServiceFactory.get_lifecycle_manager().finish_walk(input.booking_id)


@activity.defn
async def fetch_bookings(input: OwnerQuery) -> list[Booking]:
    return await ServiceFactory.get_lifecycle_manager().fetch_bookings(input.owner_id)


@activity.defn
async def reconcile_payment(input: PaymentRef) -> Payment:
    """Converge a payment left in processing with the gateway's records."""
    logger.info("Activity reconcile_payment started for payment %s", input.payment_id)
    return await ServiceFactory.get_payment_orchestrator().reconcile(input.payment_id)


ALL_ACTIVITIES = [create_booking, cancel_booking, start_walk, finish_walk, fetch_bookings, reconcile_payment]
