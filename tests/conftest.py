"""Shared fixtures: in-memory adapters, a scriptable gateway, and wired services."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from dogwalk.domain.models import BookingRequest, GatewayResult, Payment
from dogwalk.lifecycle import BookingLifecycleManager
from dogwalk.orchestrator import PaymentOrchestrator
from dogwalk.services.factory import ServiceFactory
from dogwalk.services.memory import InMemoryRepository


class FakeGateway:
    """Gateway double with scripted outcomes and a record of every call."""

    def __init__(self, succeed: bool = True, delay: float = 0.0) -> None:
        self.succeed = succeed
        self.refund_succeeds = True
        self.delay = delay
        self.submitted: list[Payment] = []
        self.refunds: list[tuple[str, int]] = []
        self.events: list[str] = []
        self.charges: dict[str, GatewayResult] = {}

    async def submit(self, payment: Payment) -> GatewayResult:
        self.submitted.append(payment)
        self.events.append(f"submit:{payment.id}")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.succeed:
            result = GatewayResult(success=True, reference=f"ref-{payment.id}")
        else:
            result = GatewayResult(success=False, reason="card_declined")
        self.charges[payment.id] = result
        return result

    async def refund(self, reference: str, amount: int) -> GatewayResult:
        self.refunds.append((reference, amount))
        self.events.append(f"refund:{reference}")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.refund_succeeds:
            return GatewayResult(success=True, reference=f"re-{reference}")
        return GatewayResult(success=False, reason="refund_declined")

    async def lookup(self, payment_id: str) -> GatewayResult | None:
        return self.charges.get(payment_id)


@pytest.fixture
def future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=2)


@pytest.fixture
def make_request(future: datetime):
    def _make(**overrides) -> BookingRequest:
        data = {
            "owner_id": "owner-1",
            "walker_id": "walker-1",
            "dog_ids": ["dog-1"],
            "scheduled_at": future,
        }
        data.update(overrides)
        return BookingRequest(**data)

    return _make


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def orchestrator(repository: InMemoryRepository, gateway: FakeGateway) -> PaymentOrchestrator:
    return PaymentOrchestrator(repository, gateway, default_timeout=1.0)


@pytest.fixture
def manager(
    repository: InMemoryRepository, orchestrator: PaymentOrchestrator, notifier: AsyncMock
) -> BookingLifecycleManager:
    return BookingLifecycleManager(repository, orchestrator, notifier)


@pytest.fixture(autouse=True)
def reset_factory():
    ServiceFactory.reset()
    yield
    ServiceFactory.reset()
