"""
Payment gateway facade.

Part of the **service layer** that hides external operations behind the
PaymentGateway port. In production this would call Stripe (a payment
intent per charge, a refund against the intent). Here it simulates the
call with a short sleep and declines a configurable share of charges.

Randomness is confined to this adapter; the orchestrator and the workflow
never see it.
"""

import asyncio
import logging
import random
import uuid

from dogwalk.domain.models import GatewayResult, Payment

logger = logging.getLogger(__name__)


class SimulatedGateway:
    """Simulates a card processor.

    Keeps a ledger of accepted charges so refunds can be checked against
    what was actually captured and ``lookup`` can answer reconciliation
    queries after a timeout.
    """

    def __init__(
        self,
        latency_seconds: float = 0.5,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self.latency_seconds = latency_seconds
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._charges: dict[str, GatewayResult] = {}   # payment id -> outcome
        self._captured: dict[str, int] = {}            # reference -> refundable amount

    async def submit(self, payment: Payment) -> GatewayResult:
        logger.info("Charging payment %s for %d %s", payment.id, payment.amount, payment.currency)
        await asyncio.sleep(self.latency_seconds)  # Simulate network latency
        if self._rng.random() < self.failure_rate:
            result = GatewayResult(success=False, reason="card_declined")
            logger.info("Charge declined for payment %s", payment.id)
        else:
            reference = f"pi_{uuid.uuid4().hex[:24]}"
            self._captured[reference] = payment.amount
            result = GatewayResult(success=True, reference=reference)
            logger.info("Charge successful for payment %s (%s)", payment.id, reference)
        self._charges[payment.id] = result
        return result

    async def refund(self, reference: str, amount: int) -> GatewayResult:
        logger.info("Refunding %d against %s", amount, reference)
        await asyncio.sleep(self.latency_seconds)
        available = self._captured.get(reference)
        if available is None:
            return GatewayResult(success=False, reference=reference, reason="unknown_charge")
        if amount > available:
            return GatewayResult(success=False, reference=reference, reason="amount_exceeds_charge")
        self._captured[reference] = available - amount
        logger.info("Refund successful against %s", reference)
        return GatewayResult(success=True, reference=f"re_{uuid.uuid4().hex[:24]}")

    async def lookup(self, payment_id: str) -> GatewayResult | None:
        return self._charges.get(payment_id)
