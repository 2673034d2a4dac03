"""
Payment orchestrator: drives a payment from submission to a terminal state.

Execution flow of ``process``:
    1. Validate (InvalidPayment, nothing written)
    2. pending → processing, persist
    3. Submit to the gateway, bounded by a timeout
    4. processing → completed on success / → failed on decline, error or
       timeout, persist

The orchestrator never retries the gateway: retry policy belongs to the
gateway adapter or to a caller further up (the Temporal workflow).

Calling ``process`` again for the same id never charges twice: settled
payments are returned unchanged and a ``processing`` one is looked up at
the gateway before anything is resubmitted.

Every status change is persisted before the method returns. If the final
write fails the payment stays ``processing`` in storage and the
PersistenceError propagates; ``reconcile`` is the pass that later asks the
gateway what really happened and converges the record.
"""

import asyncio
import logging

from dogwalk.domain.models import GatewayResult, Payment, PaymentStatus
from dogwalk.domain.states import advance_payment
from dogwalk.domain.validation import validate_payment
from dogwalk.errors import GatewayError, InvalidRefund, PaymentNotFound
from dogwalk.locks import KeyedLock
from dogwalk.ports import PaymentGateway, Repository

logger = logging.getLogger(__name__)

GATEWAY_TIMEOUT = "gateway_timeout"
NOT_FOUND_AT_GATEWAY = "not_found_at_gateway"


class PaymentOrchestrator:
    """Owns the lifecycle of Payment entities.

    The gateway is injected at construction so tests can substitute a
    double; there is no module-level client.
    """

    def __init__(
        self,
        repository: Repository,
        gateway: PaymentGateway,
        default_timeout: float = 10.0,
        locks: KeyedLock | None = None,
    ) -> None:
        self.repository = repository
        self.gateway = gateway
        self.default_timeout = default_timeout
        self.locks = locks or KeyedLock()

    async def process(self, payment: Payment, timeout: float | None = None) -> Payment:
        """Charge ``payment`` and return it in its persisted terminal state.

        Safe to call again for the same payment id: a stored payment that
        is already settled is returned as-is, and one left in ``processing``
        is first looked up at the gateway so it is never charged twice.
        """
        validate_payment(payment).raise_for_errors()
        timeout = self.default_timeout if timeout is None else timeout

        if self.locks.locked(payment.id):
            logger.debug("Payment %s busy, waiting for the current operation", payment.id)
        async with self.locks.hold(payment.id):
            stored = await self.repository.find_payment(payment.id)
            if stored is not None:
                if stored.status not in (PaymentStatus.PENDING, PaymentStatus.PROCESSING):
                    logger.info("Payment %s already %s", stored.id, stored.status.value)
                    return stored
                payment = stored

            result = None
            if payment.status is PaymentStatus.PENDING:
                payment = advance_payment(payment, PaymentStatus.PROCESSING)
                await self.repository.save_payment(payment)
            elif stored is not None:
                # Resumed after an interrupted attempt.
                result = await self.gateway.lookup(payment.id)
            else:
                await self.repository.save_payment(payment)
            logger.info("Payment %s processing (%d %s)", payment.id, payment.amount, payment.currency)

            if result is None:
                result = await self._submit(payment, timeout)
            payment = self._settle(payment, result)
            await self.repository.save_payment(payment)

        logger.info("Payment %s %s", payment.id, payment.status.value)
        return payment

    async def refund(self, payment_id: str, amount: int | None = None, timeout: float | None = None) -> Payment:
        """Refund a completed payment; ``amount=None`` refunds it in full."""
        timeout = self.default_timeout if timeout is None else timeout

        async with self.locks.hold(payment_id):
            payment = await self.repository.find_payment(payment_id)
            if payment is None:
                raise PaymentNotFound(payment_id)
            if payment.status is not PaymentStatus.COMPLETED:
                raise InvalidRefund(
                    f"Payment {payment_id} is {payment.status.value}, only completed payments can be refunded"
                )
            amount = payment.amount if amount is None else amount
            if amount <= 0:
                raise InvalidRefund(f"Refund amount must be positive, got {amount}")
            if amount > payment.amount:
                raise InvalidRefund(f"Refund amount {amount} exceeds original amount {payment.amount}")
            if not payment.gateway_reference:
                raise InvalidRefund(f"Payment {payment_id} has no gateway reference")

            logger.info("Refunding %d of payment %s", amount, payment_id)
            try:
                result = await asyncio.wait_for(self.gateway.refund(payment.gateway_reference, amount), timeout)
            except asyncio.TimeoutError as exc:
                raise GatewayError(f"Refund of payment {payment_id} timed out after {timeout:.1f}s") from exc
            if not result.success:
                raise GatewayError(f"Refund of payment {payment_id} declined: {result.reason or 'unknown'}")

            payment = advance_payment(payment, PaymentStatus.REFUNDED, refunded_amount=amount)
            await self.repository.save_payment(payment)

        logger.info("Payment %s refunded (%d)", payment_id, amount)
        return payment

    async def reconcile(self, payment_id: str) -> Payment:
        """Converge a payment stuck in ``processing`` with the gateway's records.

        Payments in any other status are returned untouched, so running the
        pass repeatedly is safe.
        """
        async with self.locks.hold(payment_id):
            payment = await self.repository.find_payment(payment_id)
            if payment is None:
                raise PaymentNotFound(payment_id)
            if payment.status is not PaymentStatus.PROCESSING:
                return payment

            result = await self.gateway.lookup(payment_id)
            if result is None:
                result = GatewayResult(success=False, reason=NOT_FOUND_AT_GATEWAY)
            payment = self._settle(payment, result)
            await self.repository.save_payment(payment)

        logger.info("Reconciled payment %s to %s", payment_id, payment.status.value)
        return payment

    # ── Helpers ──────────────────────────────────────────────────

    async def _submit(self, payment: Payment, timeout: float) -> GatewayResult:
        try:
            return await asyncio.wait_for(self.gateway.submit(payment), timeout)
        except asyncio.TimeoutError:
            logger.warning("Gateway timed out after %.1fs for payment %s", timeout, payment.id)
            return GatewayResult(success=False, reason=GATEWAY_TIMEOUT)
        except GatewayError as exc:
            logger.warning("Gateway error for payment %s: %s", payment.id, exc)
            return GatewayResult(success=False, reason=str(exc) or "gateway_error")

    @staticmethod
    def _settle(payment: Payment, result: GatewayResult) -> Payment:
        if result.success:
            return advance_payment(
                payment, PaymentStatus.COMPLETED, gateway_reference=result.reference, failure_reason=None
            )
        return advance_payment(payment, PaymentStatus.FAILED, failure_reason=result.reason)
