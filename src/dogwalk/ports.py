"""
Collaborator ports consumed by the booking core.

Any class with matching async methods satisfies these protocols
(structural subtyping, no explicit inheritance needed). The in-memory and
simulated adapters under ``dogwalk.services`` implement them; production
adapters (Postgres, Stripe, push/email) live with the surrounding services.

Failure contract:
  - Repository methods raise PersistenceError on I/O failure.
  - PaymentGateway methods report declines through GatewayResult and raise
    GatewayError when the gateway itself cannot be reached.
  - Notifier.notify may raise anything; the core logs and moves on.
"""

from collections.abc import Sequence
from typing import Protocol

from dogwalk.domain.models import Booking, GatewayResult, Notification, Payment


class Repository(Protocol):
    async def save_booking(self, booking: Booking) -> None: ...

    async def save_payment(self, payment: Payment) -> None: ...

    async def find_booking(self, booking_id: str) -> Booking | None: ...

    async def find_bookings_by_owner(self, owner_id: str) -> Sequence[Booking]: ...

    async def find_payment(self, payment_id: str) -> Payment | None: ...


class PaymentGateway(Protocol):
    async def submit(self, payment: Payment) -> GatewayResult: ...

    async def refund(self, reference: str, amount: int) -> GatewayResult: ...

    async def lookup(self, payment_id: str) -> GatewayResult | None:
        """Return the gateway's view of a charge, or None if it never arrived."""
        ...


class Notifier(Protocol):
    async def notify(self, user_id: str, event: Notification) -> None: ...
