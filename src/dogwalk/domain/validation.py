"""
Stateless validation predicates.

Validators return a ValidationResult instead of raising, so callers decide
when a failure becomes an exception. None of them touch storage. The result
is tagged with the error class it stands for; ``raise_for_errors()`` turns a
failed result into that error with every reason attached.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from dogwalk.domain.models import Booking, Dog, Payment, PaymentStatus, User, utcnow
from dogwalk.errors import InvalidBooking, InvalidDog, InvalidPayment, InvalidUser, ValidationFailed

# A payment may only enter the orchestrator in one of these statuses.
INITIAL_PAYMENT_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.PROCESSING})

# Amounts must be strictly greater than this.
MIN_PAYMENT_AMOUNT = 0

DOG_MAX_NAME_LENGTH = 50
DOG_MIN_AGE = 0
DOG_MAX_AGE = 30

USER_MAX_NAME_LENGTH = 100
USER_MAX_EMAIL_LENGTH = 254
EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9+._%\-]{1,256}@[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+$"
)
PHONE_RE = re.compile(r"^(\+\d{1,3}( )?)?((\(\d{3}\))|\d{3})[- .]?\d{3}[- .]?\d{4}$")


@dataclass(frozen=True)
class ValidationResult:
    error_type: type[ValidationFailed]
    reasons: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.reasons

    def raise_for_errors(self) -> None:
        if self.reasons:
            raise self.error_type(self.reasons)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_booking(booking: Booking, now: datetime | None = None) -> ValidationResult:
    now = now or utcnow()
    reasons = []
    if _blank(booking.id):
        reasons.append("booking id is required")
    if _blank(booking.owner_id):
        reasons.append("owner id is required")
    if _blank(booking.walker_id):
        reasons.append("walker id is required")
    if not booking.dog_ids:
        reasons.append("at least one dog is required")
    elif any(_blank(dog_id) for dog_id in booking.dog_ids):
        reasons.append("dog ids must not be blank")
    if booking.scheduled_at <= now:
        reasons.append("scheduled time must be in the future")
    return ValidationResult(InvalidBooking, tuple(reasons))


def validate_payment(payment: Payment) -> ValidationResult:
    reasons = []
    if _blank(payment.id):
        reasons.append("payment id is required")
    if payment.amount <= MIN_PAYMENT_AMOUNT:
        reasons.append(f"amount must be greater than {MIN_PAYMENT_AMOUNT}")
    if payment.payer_id == payment.payee_id:
        reasons.append("payer and payee must differ")
    if payment.status not in INITIAL_PAYMENT_STATUSES:
        reasons.append(f"status {payment.status.value} is not a valid initial status")
    return ValidationResult(InvalidPayment, tuple(reasons))


def validate_dog(dog: Dog) -> ValidationResult:
    reasons = []
    if _blank(dog.id):
        reasons.append("dog id is required")
    if _blank(dog.owner_id):
        reasons.append("owner id is required")
    if _blank(dog.name):
        reasons.append("dog name is required")
    elif len(dog.name) > DOG_MAX_NAME_LENGTH:
        reasons.append(f"dog name cannot exceed {DOG_MAX_NAME_LENGTH} characters")
    if _blank(dog.breed):
        reasons.append("dog breed is required")
    if not DOG_MIN_AGE <= dog.age <= DOG_MAX_AGE:
        reasons.append(f"dog age must be between {DOG_MIN_AGE} and {DOG_MAX_AGE}")
    return ValidationResult(InvalidDog, tuple(reasons))


def validate_user(user: User) -> ValidationResult:
    reasons = []
    if _blank(user.id):
        reasons.append("user id is required")
    if _blank(user.name):
        reasons.append("name is required")
    elif len(user.name) > USER_MAX_NAME_LENGTH:
        reasons.append(f"name cannot exceed {USER_MAX_NAME_LENGTH} characters")
    if len(user.email) > USER_MAX_EMAIL_LENGTH or not EMAIL_RE.match(user.email):
        reasons.append("invalid email address")
    if not PHONE_RE.match(user.phone_number):
        reasons.append("invalid phone number")
    return ValidationResult(InvalidUser, tuple(reasons))
