"""
Domain models for the walk-booking core.

All models use Pydantic v2 BaseModel for validation, serialization and
deserialization. Temporal transmits workflow/activity inputs and outputs as
JSON payloads, and the pydantic_data_converter configured on both the client
and the worker round-trips these models.

Enums inherit from (str, Enum) so they serialize as plain strings in JSON
(e.g. "confirmed" instead of {"value": "confirmed"}).

Structural checks (types, timezone awareness) live here; business predicates
(non-empty dog list, future schedule, payer != payee) live in
``dogwalk.domain.validation`` so they surface as tagged domain errors rather
than pydantic ValidationErrors.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import AwareDatetime, BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class BookingStatus(str, Enum):
    """Lifecycle states of a booking; transitions live in states.py."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Lifecycle states of a payment; transitions live in states.py."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class UserType(str, Enum):
    OWNER = "owner"
    WALKER = "walker"


class NotificationEvent(str, Enum):
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    WALK_STARTED = "walk_started"
    WALK_COMPLETED = "walk_completed"


# ── Entities ─────────────────────────────────────────────────────────


class Dog(BaseModel):
    """A dog profile, owned by the client-side repositories."""

    id: str
    owner_id: str
    name: str
    breed: str
    age: int


class User(BaseModel):
    """An owner or walker account, referenced by id from bookings."""

    id: str
    name: str
    email: str
    phone_number: str
    user_type: UserType = UserType.OWNER


class Booking(BaseModel):
    """A scheduled walk between an owner and a walker.

    The booking references its payment by id only; the payment's lifecycle
    belongs to the PaymentOrchestrator.
    """

    id: str
    owner_id: str
    walker_id: str
    dog_ids: list[str]                                 # ordered, never empty once validated
    scheduled_at: AwareDatetime = Field(frozen=True)   # immutable after creation
    duration_minutes: int = 30
    amount: int = 0                                    # derived price, smallest currency unit
    currency: str = "USD"
    payment_id: str | None = None                      # set before the first write
    status: BookingStatus = BookingStatus.PENDING
    cancellation_reason: str | None = None
    created_at: AwareDatetime = Field(default_factory=utcnow)
    updated_at: AwareDatetime = Field(default_factory=utcnow)


class Payment(BaseModel):
    """Money moving from the owner (payer) to the walker (payee)."""

    id: str
    amount: int                                        # smallest currency unit, > 0
    currency: str = "USD"
    payer_id: str
    payee_id: str
    booking_id: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    gateway_reference: str | None = None               # set once the gateway accepts the charge
    failure_reason: str | None = None
    refunded_amount: int = 0
    timestamp: AwareDatetime = Field(default_factory=utcnow)
    updated_at: AwareDatetime = Field(default_factory=utcnow)


# ── Collaborator payloads ────────────────────────────────────────────


class GatewayResult(BaseModel):
    """What the payment gateway reports back for a charge or a refund."""

    success: bool
    reference: str | None = None   # gateway-side id (e.g. a payment intent id)
    reason: str | None = None      # decline / failure code when success is False


class Notification(BaseModel):
    """Fire-and-forget message handed to the notification port."""

    event: NotificationEvent
    booking_id: str
    message: str = ""


# ── Workflow input / output ──────────────────────────────────────────


class BookingRequest(BaseModel):
    """Input to BookingWorkflow and to BookingLifecycleManager.create_booking.

    ``booking_id`` defaults to a fresh UUID so that a caller can derive a
    stable workflow id from it before the booking exists.
    """

    booking_id: str = Field(default_factory=new_id)
    owner_id: str
    walker_id: str
    dog_ids: list[str] = Field(default_factory=list)
    scheduled_at: AwareDatetime
    duration_minutes: int = Field(default=30, gt=0)


class BookingResult(BaseModel):
    """Final result returned by the booking workflow to the client."""

    booking_id: str
    status: BookingStatus | None = None   # None when creation itself failed
    booking: Booking | None = None
    error: str | None = None


# ── Activity payload models ──────────────────────────────────────────
# Each activity takes a single Pydantic model as input, mirroring the
# workflow-facing surface.


class BookingAction(BaseModel):
    """Payload for the cancel_booking, start_walk and finish_walk activities."""

    booking_id: str
    reason: str | None = None


class OwnerQuery(BaseModel):
    """Payload for the fetch_bookings activity."""

    owner_id: str


class PaymentRef(BaseModel):
    """Payload for the reconcile_payment activity."""

    payment_id: str
