"""
Simple factory for service singletons.

Activities call ``ServiceFactory.get_*()`` instead of building the core
themselves. The factory wires the adapters, the PaymentOrchestrator and the
BookingLifecycleManager once, from Settings, and caches them at class level.

Tests replace the cache with ``ServiceFactory.configure(...)`` and clear it
with ``ServiceFactory.reset()``.
"""

from dogwalk.config import Settings, get_settings
from dogwalk.domain.pricing import StandardPricingStrategy
from dogwalk.lifecycle import BookingLifecycleManager
from dogwalk.orchestrator import PaymentOrchestrator
from dogwalk.ports import Notifier, PaymentGateway, Repository
from dogwalk.services.gateway import SimulatedGateway
from dogwalk.services.memory import InMemoryRepository
from dogwalk.services.notify import LoggingNotifier


class ServiceFactory:
    """Lazily creates and caches service instances (class-level singletons)."""

    _settings: Settings | None = None
    _repository: Repository | None = None
    _gateway: PaymentGateway | None = None
    _notifier: Notifier | None = None
    _orchestrator: PaymentOrchestrator | None = None
    _lifecycle: BookingLifecycleManager | None = None

    @classmethod
    def get_settings(cls) -> Settings:
        if cls._settings is None:
            cls._settings = get_settings()
        return cls._settings

    @classmethod
    def get_repository(cls) -> Repository:
        if cls._repository is None:
            cls._repository = InMemoryRepository()
        return cls._repository

    @classmethod
    def get_gateway(cls) -> PaymentGateway:
        if cls._gateway is None:
            settings = cls.get_settings()
            cls._gateway = SimulatedGateway(
                latency_seconds=settings.gateway_latency_seconds,
                failure_rate=settings.gateway_failure_rate,
            )
        return cls._gateway

    @classmethod
    def get_notifier(cls) -> Notifier:
        if cls._notifier is None:
            cls._notifier = LoggingNotifier()
        return cls._notifier

    @classmethod
    def get_payment_orchestrator(cls) -> PaymentOrchestrator:
        if cls._orchestrator is None:
            cls._orchestrator = PaymentOrchestrator(
                cls.get_repository(),
                cls.get_gateway(),
                default_timeout=cls.get_settings().gateway_timeout_seconds,
            )
        return cls._orchestrator

    @classmethod
    def get_lifecycle_manager(cls) -> BookingLifecycleManager:
        if cls._lifecycle is None:
            settings = cls.get_settings()
            cls._lifecycle = BookingLifecycleManager(
                cls.get_repository(),
                cls.get_payment_orchestrator(),
                cls.get_notifier(),
                pricing=StandardPricingStrategy(
                    base_cents=settings.base_walk_price_cents,
                    extra_dog_cents=settings.extra_dog_price_cents,
                    included_minutes=settings.included_minutes,
                    block_minutes=settings.extra_minutes_block,
                    block_cents=settings.extra_block_price_cents,
                ),
                currency=settings.currency,
            )
        return cls._lifecycle

    @classmethod
    def configure(
        cls,
        *,
        settings: Settings | None = None,
        repository: Repository | None = None,
        gateway: PaymentGateway | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Swap in collaborators; dependent services are rebuilt on next use."""
        cls.reset()
        cls._settings = settings
        cls._repository = repository
        cls._gateway = gateway
        cls._notifier = notifier

    @classmethod
    def reset(cls) -> None:
        cls._settings = None
        cls._repository = None
        cls._gateway = None
        cls._notifier = None
        cls._orchestrator = None
        cls._lifecycle = None
