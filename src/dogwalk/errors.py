"""
Error taxonomy for the booking core.

Validation errors are caller-local: they are raised before any state is
written and are never worth retrying. ``PersistenceError`` and
``GatewayError`` wrap failures of the external collaborators; the core
reports them as operation failures and never retries them itself.

Temporal identifies an activity failure by the exception's class name, so
``NON_RETRYABLE_ERROR_TYPES`` is what the workflow hands to its
``RetryPolicy`` to keep domain failures from being retried.
"""

from collections.abc import Iterable


class DogWalkError(Exception):
    """Base class for every error the booking core raises."""


class ValidationFailed(DogWalkError):
    """A record failed its validation predicates."""

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or self.__class__.__name__)


class InvalidBooking(ValidationFailed):
    pass


class InvalidPayment(ValidationFailed):
    pass


class InvalidDog(ValidationFailed):
    pass


class InvalidUser(ValidationFailed):
    pass


class InvalidTransition(DogWalkError):
    """The requested status change is not in the lifecycle graph."""

    def __init__(self, entity: str, current: str, target: str) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Invalid {entity} transition: {current} -> {target}")


class InvalidRefund(DogWalkError):
    pass


class PersistenceError(DogWalkError):
    pass


class GatewayError(DogWalkError):
    pass


class BookingNotFound(DogWalkError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class PaymentNotFound(DogWalkError):
    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} not found")


NON_RETRYABLE_ERROR_TYPES: list[str] = [
    cls.__name__
    for cls in (
        InvalidBooking,
        InvalidPayment,
        InvalidTransition,
        InvalidRefund,
        PersistenceError,
        GatewayError,
        BookingNotFound,
        PaymentNotFound,
    )
]
