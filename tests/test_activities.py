"""Activities run through temporalio's ActivityEnvironment, no server required."""

import pytest
from temporalio.testing import ActivityEnvironment

from dogwalk.activities import (
    cancel_booking,
    create_booking,
    fetch_bookings,
    finish_walk,
    reconcile_payment,
    start_walk,
)
from dogwalk.config import Settings
from dogwalk.domain.models import BookingAction, BookingStatus, OwnerQuery, Payment, PaymentRef, PaymentStatus
from dogwalk.errors import NON_RETRYABLE_ERROR_TYPES, InvalidBooking, InvalidTransition
from dogwalk.services.factory import ServiceFactory


@pytest.fixture
def env(repository, gateway, notifier) -> ActivityEnvironment:
    ServiceFactory.configure(
        settings=Settings(gateway_timeout_seconds=1.0, currency="EUR"),
        repository=repository,
        gateway=gateway,
        notifier=notifier,
    )
    return ActivityEnvironment()


@pytest.mark.asyncio
async def test_full_walk(env, make_request):
    booking = await env.run(create_booking, make_request())
    assert booking.status is BookingStatus.CONFIRMED
    assert booking.currency == "EUR"

    action = BookingAction(booking_id=booking.id)
    assert (await env.run(start_walk, action)).status is BookingStatus.IN_PROGRESS
    assert (await env.run(finish_walk, action)).status is BookingStatus.COMPLETED

    bookings = await env.run(fetch_bookings, OwnerQuery(owner_id="owner-1"))
    assert [b.id for b in bookings] == [booking.id]


@pytest.mark.asyncio
async def test_cancel_refunds(env, repository, make_request):
    booking = await env.run(create_booking, make_request())

    cancelled = await env.run(cancel_booking, BookingAction(booking_id=booking.id, reason="rain"))

    assert cancelled.status is BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "rain"
    assert (await repository.find_payment(booking.payment_id)).status is PaymentStatus.REFUNDED


@pytest.mark.asyncio
async def test_domain_errors_propagate(env, make_request):
    with pytest.raises(InvalidBooking):
        await env.run(create_booking, make_request(dog_ids=[]))

    booking = await env.run(create_booking, make_request())
    with pytest.raises(InvalidTransition):
        await env.run(finish_walk, BookingAction(booking_id=booking.id))


@pytest.mark.asyncio
async def test_reconcile_payment(env, repository, gateway):
    await repository.save_payment(
        Payment(id="p-9", amount=900, payer_id="o-1", payee_id="w-1", status=PaymentStatus.PROCESSING)
    )

    payment = await env.run(reconcile_payment, PaymentRef(payment_id="p-9"))

    assert payment.status is PaymentStatus.FAILED


def test_domain_errors_are_not_retried():
    assert "InvalidBooking" in NON_RETRYABLE_ERROR_TYPES
    assert "InvalidTransition" in NON_RETRYABLE_ERROR_TYPES
    assert "GatewayError" in NON_RETRYABLE_ERROR_TYPES


def test_factory_wires_settings(monkeypatch):
    monkeypatch.setenv("DOGWALK_BASE_WALK_PRICE_CENTS", "2000")
    monkeypatch.setenv("DOGWALK_GATEWAY_TIMEOUT_SECONDS", "3.5")
    ServiceFactory.configure(settings=Settings())

    manager = ServiceFactory.get_lifecycle_manager()

    assert manager.pricing.base_cents == 2000
    assert ServiceFactory.get_payment_orchestrator().default_timeout == 3.5
    assert manager.orchestrator is ServiceFactory.get_payment_orchestrator()
    assert manager.repository is ServiceFactory.get_repository()


def test_factory_caches_instances():
    assert ServiceFactory.get_gateway() is ServiceFactory.get_gateway()
    assert ServiceFactory.get_notifier() is ServiceFactory.get_notifier()
