"""
Temporal workflow: BookingWorkflow.

One workflow execution follows one booking from creation to a terminal
state. Temporal persists the workflow's state at every ``await``, so a
worker crash between "payment confirmed" and "walk started" loses nothing.

Key constraints inside a workflow:
  - Must be **deterministic**: no I/O, no randomness, no system clock, no
    settings lookups. Side-effects go through activities.
  - Use ``workflow.logger`` instead of the stdlib ``logging`` module.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

# Temporal runs workflows inside a sandbox that intercepts imports. Our
# modules (and pydantic) are only used for data modelling here, so they are
# passed through.
with workflow.unsafe.imports_passed_through():
    from dogwalk.activities import cancel_booking, create_booking, finish_walk, start_walk
    from dogwalk.domain.models import Booking, BookingAction, BookingRequest, BookingResult, BookingStatus
    from dogwalk.domain.states import is_terminal_booking
    from dogwalk.errors import NON_RETRYABLE_ERROR_TYPES

TransitionActivity = Callable[[BookingAction], Awaitable[Booking]]


@workflow.defn
class BookingWorkflow:
    """Drives a booking through its lifecycle.

    Execution flow:
        1. create_booking activity   → validated, paid, confirmed or cancelled
        2. wait for signals until the booking is terminal:
             walk_started   → start_walk activity   (confirmed → in_progress)
             walk_finished  → finish_walk activity  (in_progress → completed)
             cancel         → cancel_booking activity (refunds when paid)

    A failed transition (for example a declined refund) is recorded in
    ``error`` and the workflow keeps waiting; only a failed creation ends it.
    """

    def __init__(self) -> None:
        self.request: BookingRequest | None = None
        self.booking: Booking | None = None
        self.walk_started_received = False
        self.walk_finished_received = False
        self.cancel_requested = False
        self.cancel_reason: str | None = None
        self.error: str | None = None

    # ── Signals ───────────────────────────────────────────────────

    @workflow.signal
    async def walk_started(self) -> None:
        self.walk_started_received = True

    @workflow.signal
    async def walk_finished(self) -> None:
        self.walk_finished_received = True

    @workflow.signal
    async def cancel(self, reason: str | None = None) -> None:
        self.cancel_requested = True
        self.cancel_reason = reason

    # ── Query ─────────────────────────────────────────────────────

    @workflow.query
    def get_status(self) -> dict[str, Any]:
        return {
            "booking_id": self.request.booking_id if self.request else None,
            "status": self.booking.status.value if self.booking else None,
            "payment_id": self.booking.payment_id if self.booking else None,
            "amount": self.booking.amount if self.booking else None,
            "cancel_requested": self.cancel_requested,
            "error": self.error,
        }

    # ── Helpers ───────────────────────────────────────────────────

    def _result(self) -> BookingResult:
        return BookingResult(
            booking_id=self.request.booking_id if self.request else "",
            status=self.booking.status if self.booking else None,
            booking=self.booking,
            error=self.error,
        )

    def _next_activity(self) -> TransitionActivity | None:
        """The activity the received signals call for, or None to keep waiting."""
        if self.booking is None:
            return None
        if self.cancel_requested:
            return cancel_booking
        if self.booking.status is BookingStatus.CONFIRMED and self.walk_started_received:
            return start_walk
        if self.booking.status is BookingStatus.IN_PROGRESS and self.walk_finished_received:
            return finish_walk
        return None

    def _consume(self, activity_fn: TransitionActivity) -> BookingAction:
        """Clear the signal that selected ``activity_fn`` and build its input."""
        if activity_fn is cancel_booking:
            self.cancel_requested = False
            return BookingAction(booking_id=self.booking.id, reason=self.cancel_reason)
        if activity_fn is start_walk:
            self.walk_started_received = False
        elif activity_fn is finish_walk:
            self.walk_finished_received = False
        else:
            raise ValueError(f"Not a booking transition activity: {activity_fn!r}")
        return BookingAction(booking_id=self.booking.id)

    # ── Run ───────────────────────────────────────────────────────

    @workflow.run
    async def run(self, req: BookingRequest) -> BookingResult:
        self.request = req

        # Domain errors are final; only infrastructure hiccups are retried.
        retry_policy = RetryPolicy(
            maximum_attempts=5,
            initial_interval=timedelta(seconds=1),
            backoff_coefficient=2.0,
            non_retryable_error_types=NON_RETRYABLE_ERROR_TYPES,
        )
        # Must exceed the gateway timeout configured on the worker.
        activity_opts = {
            "start_to_close_timeout": timedelta(seconds=60),
            "retry_policy": retry_policy,
        }

        workflow.logger.info("Starting booking %s for owner %s", req.booking_id, req.owner_id)

        try:
            self.booking = await workflow.execute_activity(create_booking, req, **activity_opts)
        except ActivityError as err:
            workflow.logger.exception("Booking %s could not be created", req.booking_id)
            self.error = str(err.cause or err)
            return self._result()

        while not is_terminal_booking(self.booking.status):
            await workflow.wait_condition(lambda: self._next_activity() is not None)
            activity_fn = self._next_activity()
            payload = self._consume(activity_fn)
            try:
                self.booking = await workflow.execute_activity(activity_fn, payload, **activity_opts)
                self.error = None
            except ActivityError as err:
                workflow.logger.warning("Transition on booking %s failed: %s", req.booking_id, err.cause or err)
                self.error = str(err.cause or err)

        workflow.logger.info("Booking %s finished as %s", req.booking_id, self.booking.status.value)
        return self._result()
